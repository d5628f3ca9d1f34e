"""
Fleet Poller - Chunk Worker.

Runs inside a worker process and polls its chunk of hosts one at a time:

    session -> identify -> dispatch -> map -> record

A host that fails at any stage contributes nothing; the failure is logged
at DEBUG and the worker moves on. Records are published through the
ResultExchange slot owned by this worker.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import PollerSettings
from .exceptions import PollError
from .exchange import ResultExchange
from .logs import setup_logging
from .mappers.dispatch import MapperDispatchTable
from .models import ConfigTemplate, Device, HostContext, HostDescriptor
from .snmp.identify import identify
from .snmp.session import build_session, resolve_template


log = logging.getLogger("fleetpoll.worker")


async def poll_host(
    host: HostDescriptor,
    templates: Mapping[str, ConfigTemplate],
    settings: PollerSettings,
    dispatch: Optional[MapperDispatchTable] = None,
) -> Optional[Device]:
    """
    Poll a single host.

    Never raises for device problems. The session is closed before
    returning, whether or not mapping succeeded.

    Returns:
        The mapped Device, or None if the host failed
    """
    dispatch = dispatch or MapperDispatchTable()

    try:
        template = resolve_template(host, templates)
        async with build_session(host, template, settings) as session:
            type_identifier = await identify(session)
            context = HostContext(host=host, type_identifier=type_identifier)

            strategy = await dispatch.resolve(session, context)
            log.debug(f"{host.ip}: {type_identifier} -> {strategy.name}")

            return await strategy.create(session, context).map()

    except PollError as e:
        log.debug(f"Failed to get mappings from {host.ip}: {type(e).__name__}: {e}")
    except Exception as e:
        # Mapper bugs end this host only
        log.debug(f"Failed to get mappings from {host.ip}: {type(e).__name__}: {e}", exc_info=True)

    return None


async def poll_chunk(
    chunk: Sequence[HostDescriptor],
    templates: Mapping[str, ConfigTemplate],
    settings: PollerSettings,
    dispatch: Optional[MapperDispatchTable] = None,
) -> List[Dict[str, Any]]:
    """Poll hosts sequentially, in chunk order, returning successful records."""
    dispatch = dispatch or MapperDispatchTable()
    records: List[Dict[str, Any]] = []

    for host in chunk:
        device = await poll_host(host, templates, settings, dispatch)
        if device is not None:
            records.append(device.to_dict())

    log.debug(f"Chunk complete: {len(records)}/{len(chunk)} hosts mapped")
    return records


def run_worker(
    index: int,
    chunk: Sequence[HostDescriptor],
    templates: Mapping[str, ConfigTemplate],
    settings: PollerSettings,
    exchange: ResultExchange,
    dispatch: Optional[MapperDispatchTable] = None,
) -> None:
    """
    Worker process entry point.

    Empty chunks do no work and publish nothing.
    """
    if not chunk:
        return

    if settings.debug:
        logger = logging.getLogger("fleetpoll")
        if logger.handlers:
            logger.setLevel(logging.DEBUG)
        else:
            # spawn and forkserver children inherit no handlers
            setup_logging("DEBUG")

    records = asyncio.run(poll_chunk(chunk, templates, settings, dispatch))
    exchange.write(index, records)
