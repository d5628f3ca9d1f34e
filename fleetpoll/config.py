"""
Fleet Poller - Runtime Settings.

Process-wide polling configuration, read from the environment (and an
optional .env file):

    SNMP_FORKS           worker processes per poll (default 25)
    SNMP_TIMEOUT         per-query timeout in whole seconds (default 0.5s)
    SNMP_RETRIES         retries per query (default 0)
    DEBUG                "true" to log every per-host failure
    POLLER_EXCHANGE_DIR  directory for worker result slots (default: temp dir)
    POLLER_START_METHOD  multiprocessing start method (default: platform)

Usage:
    from fleetpoll.config import PollerSettings

    settings = PollerSettings.from_env()
    settings = PollerSettings(workers=4, timeout=2.0)
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_WORKERS = 25
DEFAULT_TIMEOUT = 0.5
DEFAULT_RETRIES = 0


def _env_int(name: str, default: int = 0) -> int:
    """Read an integer environment variable, tolerating junk values."""
    raw = os.getenv(name, "")
    try:
        return int(raw.strip())
    except ValueError:
        return default


class PollerSettings(BaseModel):
    """Immutable polling settings shared by the orchestrator and its workers."""

    model_config = ConfigDict(frozen=True)

    workers: int = Field(default=DEFAULT_WORKERS, ge=1, description="Worker process count")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-query timeout in seconds")
    retries: int = Field(default=DEFAULT_RETRIES, ge=0, description="Retries per query")
    debug: bool = Field(default=False, description="Log per-host failures")
    exchange_dir: Optional[str] = Field(default=None, description="Directory for result slots")
    start_method: Optional[str] = Field(default=None, description="multiprocessing start method")

    @property
    def exchange_path(self) -> Path:
        return Path(self.exchange_dir or tempfile.gettempdir())

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None, **overrides) -> "PollerSettings":
        """
        Build settings from environment variables.

        Non-positive SNMP_FORKS and SNMP_TIMEOUT fall back to the defaults.

        Args:
            env_file: Optional .env path (python-dotenv search path otherwise)
            **overrides: Explicit values that win over the environment
        """
        load_dotenv(env_file, override=False)

        workers = _env_int("SNMP_FORKS")
        timeout = _env_int("SNMP_TIMEOUT")

        values = {
            "workers": workers if workers > 0 else DEFAULT_WORKERS,
            "timeout": float(timeout) if timeout > 0 else DEFAULT_TIMEOUT,
            "retries": max(_env_int("SNMP_RETRIES"), 0),
            "debug": os.getenv("DEBUG", "").strip().lower() == "true",
            "exchange_dir": os.getenv("POLLER_EXCHANGE_DIR") or None,
            "start_method": os.getenv("POLLER_START_METHOD") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
