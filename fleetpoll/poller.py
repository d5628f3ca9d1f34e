"""
Fleet Poller - Device Mapping Poller.

Orchestrates a fleet poll:

1. Partition the host list into at most `workers` even chunks
2. Start one worker process per non-empty chunk
3. Join every worker; abnormal exits count as zero records
4. Merge the records published through the ResultExchange
5. Remove the run's exchange slots, whatever happened

Partial failure is the normal case: the result is a lower bound on the
devices that could be reached and identified, never an error.

Usage:
    from fleetpoll import DeviceMappingPoller, PollerSettings

    poller = DeviceMappingPoller(PollerSettings.from_env())
    records = poller.poll(hosts, templates)

    # Or with the upstream work payload
    records = poller.poll_work({"hosts": [...], "templates": {...}})
"""

import logging
import multiprocessing
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import ValidationError

from .config import PollerSettings
from .exceptions import WorkerFailure
from .exchange import ResultExchange
from .mappers.dispatch import MapperDispatchTable
from .models import ConfigTemplate, HostDescriptor
from .worker import run_worker


log = logging.getLogger("fleetpoll.poller")

T = TypeVar("T")

HostInput = Union[HostDescriptor, Mapping[str, Any]]
TemplateInput = Union[ConfigTemplate, Mapping[str, Any]]


def partition(items: Sequence[T], workers: int) -> List[List[T]]:
    """
    Split items into at most `workers` contiguous chunks.

    Chunk sizes differ by at most one and never exceed ceil(N / workers);
    empty chunks are dropped. 10 items over 4 workers -> sizes 3, 3, 2, 2.
    """
    if workers < 1:
        raise ValueError(f"workers must be positive, got {workers}")

    size, remainder = divmod(len(items), workers)
    chunks: List[List[T]] = []
    start = 0
    for index in range(workers):
        end = start + size + (1 if index < remainder else 0)
        if end > start:
            chunks.append(list(items[start:end]))
        start = end
    return chunks


def normalize_hosts(hosts: Sequence[HostInput]) -> List[HostDescriptor]:
    """
    Validate host entries one by one.

    A malformed entry is logged and dropped; it never costs the other hosts.
    """
    valid: List[HostDescriptor] = []
    for position, entry in enumerate(hosts):
        if isinstance(entry, HostDescriptor):
            valid.append(entry)
            continue
        try:
            valid.append(HostDescriptor.model_validate(entry))
        except ValidationError as e:
            log.warning(f"Skipping host entry {position}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}")
    return valid


def normalize_templates(templates: Mapping[Any, TemplateInput]) -> Dict[str, ConfigTemplate]:
    """
    Validate templates and key them by string id (JSON object keys are strings).

    A malformed template is dropped; its hosts then fail with TemplateNotFound.
    """
    valid: Dict[str, ConfigTemplate] = {}
    for template_id, entry in templates.items():
        if isinstance(entry, ConfigTemplate):
            valid[str(template_id)] = entry
            continue
        try:
            valid[str(template_id)] = ConfigTemplate.model_validate(entry)
        except ValidationError as e:
            log.warning(f"Skipping template {template_id}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}")
    return valid


class DeviceMappingPoller:
    """
    Process-parallel SNMP device mapping.

    Attributes:
        settings: PollerSettings (worker count, timeout, retries, ...)
        dispatch: MapperDispatchTable handed to every worker
        worker: Process entry point, run_worker unless replaced
    """

    def __init__(
        self,
        settings: Optional[PollerSettings] = None,
        dispatch: Optional[MapperDispatchTable] = None,
        worker: Callable[..., None] = run_worker,
    ):
        self.settings = settings or PollerSettings.from_env()
        self.dispatch = dispatch or MapperDispatchTable()
        self.worker = worker

    def poll_work(self, work: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Poll a work payload of the form {"hosts": [...], "templates": {...}}."""
        return self.poll(work.get("hosts") or [], work.get("templates") or {})

    def poll(
        self,
        hosts: Sequence[HostInput],
        templates: Mapping[Any, TemplateInput],
    ) -> List[Dict[str, Any]]:
        """
        Poll every host and return the records of those that mapped.

        Order of the returned records is unspecified.
        """
        if not hosts:
            return []

        host_list = normalize_hosts(hosts)
        if not host_list:
            log.warning("No valid hosts to poll")
            return []
        template_table = normalize_templates(templates)
        chunks = partition(host_list, self.settings.workers)

        context = multiprocessing.get_context(self.settings.start_method)
        started = datetime.now()
        results: List[Dict[str, Any]] = []

        with ResultExchange.create(self.settings.exchange_path) as exchange:
            processes: Dict[int, multiprocessing.process.BaseProcess] = {}
            try:
                for index, chunk in enumerate(chunks):
                    process = context.Process(
                        target=self.worker,
                        args=(index, chunk, template_table, self.settings, exchange, self.dispatch),
                        name=f"fleetpoll-worker-{index}",
                    )
                    try:
                        process.start()
                    except OSError as e:
                        self._worker_failed(WorkerFailure(index, reason=f"could not start: {e}"), len(chunk))
                        continue
                    processes[index] = process

                log.info(f"Polling {len(host_list)} hosts with {len(processes)} workers (run {exchange.run_id})")

                for index, process in processes.items():
                    process.join()
                    if process.exitcode != 0:
                        self._worker_failed(WorkerFailure(index, exitcode=process.exitcode), len(chunks[index]))
                        continue
                    results.extend(exchange.read(index))
            finally:
                # No worker may outlive the exchange and write a slot after cleanup
                self._stop_workers(processes.values())

        elapsed = (datetime.now() - started).total_seconds()
        log.info(f"Mapped {len(results)}/{len(host_list)} hosts in {elapsed:.2f}s")
        return results

    def _stop_workers(self, processes) -> None:
        for process in processes:
            if process.is_alive():
                log.warning(f"Terminating {process.name}")
                process.terminate()
            process.join()

    def _worker_failed(self, failure: WorkerFailure, host_count: int) -> None:
        log.warning(f"{failure}; {host_count} hosts in its chunk produced no records")


def poll(
    hosts: Sequence[HostInput],
    templates: Mapping[Any, TemplateInput],
    settings: Optional[PollerSettings] = None,
) -> List[Dict[str, Any]]:
    """
    Convenience function for one-off polls.

    Example:
        records = poll(
            [{"id": 1, "ip": "192.0.2.10", "template_id": 1}],
            {1: {"snmp_version": 2, "snmp_community": "public"}},
        )
    """
    return DeviceMappingPoller(settings).poll(hosts, templates)
