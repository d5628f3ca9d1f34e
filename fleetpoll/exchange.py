"""
Fleet Poller - Worker Result Exchange.

Worker processes hand their records back to the orchestrator through
one JSON file ("slot") per worker:

    <directory>/fleetpoll_<run id>_<worker index>.json

Each worker owns exactly one slot, so no locking is needed. Slots are
written to a temporary name and renamed into place, so a reader never
sees a partial file. cleanup() removes everything belonging to the run;
using the exchange as a context manager guarantees that.
"""

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


log = logging.getLogger("fleetpoll.exchange")

SLOT_PREFIX = "fleetpoll"


@dataclass(frozen=True)
class ResultExchange:
    """File-backed, per-worker result slots for a single poll run."""
    directory: Path
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def create(cls, directory: Optional[Union[str, Path]] = None) -> "ResultExchange":
        return cls(Path(directory or tempfile.gettempdir()))

    def __enter__(self) -> "ResultExchange":
        self.directory.mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def slot_path(self, index: int) -> Path:
        return self.directory / f"{SLOT_PREFIX}_{self.run_id}_{index}.json"

    def write(self, index: int, records: List[Dict[str, Any]]) -> Path:
        """Publish a worker's records atomically."""
        path = self.slot_path(index)
        staging = path.with_suffix(".tmp")
        with open(staging, "w", encoding="utf-8") as f:
            json.dump(records, f)
        os.replace(staging, path)
        return path

    def read(self, index: int) -> List[Dict[str, Any]]:
        """
        Read a worker's records.

        A missing or unreadable slot yields an empty list; the worker is
        then treated as having produced nothing.
        """
        path = self.slot_path(index)
        if not path.exists():
            log.warning(f"Worker {index} left no results (run {self.run_id})")
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            log.warning(f"Worker {index} results unreadable: {e}")
            return []

        if not isinstance(records, list):
            log.warning(f"Worker {index} results are not a list, ignoring")
            return []
        return records

    def cleanup(self) -> int:
        """Remove every slot (and staging file) for this run. Returns count removed."""
        removed = 0
        for path in self.directory.glob(f"{SLOT_PREFIX}_{self.run_id}_*"):
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed
