"""
Shared fixtures for the fleet poller tests.

FakeSession stands in for SnmpSession: it answers from in-memory scalars
and tables and records every request so tests can count round trips.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from fleetpoll.config import PollerSettings
from fleetpoll.exceptions import MalformedResponse, PollError
from fleetpoll.models import ConfigTemplate, HostContext, HostDescriptor, SnmpVersion
from fleetpoll.oids import SYSTEM


class FakeSession:
    """In-memory SNMP agent with the SnmpSession query surface."""

    def __init__(
        self,
        scalars: Optional[Dict[str, Any]] = None,
        tables: Optional[Dict[str, List[Tuple[str, Any]]]] = None,
        address: str = "192.0.2.1",
        version: SnmpVersion = SnmpVersion.V2C,
        error: Optional[PollError] = None,
        failing_walks: Sequence[str] = (),
    ):
        self.scalars = dict(scalars or {})
        self.tables = {oid: list(rows) for oid, rows in (tables or {}).items()}
        self.address = address
        self.version = version
        self.error = error
        self.failing_walks = set(failing_walks)
        self.requests: List[Tuple[str, List[str]]] = []
        self.closed = False

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    async def get(self, oid: str) -> Any:
        values = await self.get_multiple([oid])
        if values[0] is None:
            raise MalformedResponse(f"{self.address}: {oid} not present")
        return values[0]

    async def get_multiple(self, oids: List[str]) -> List[Optional[Any]]:
        self.requests.append(("get", list(oids)))
        if self.error:
            raise self.error
        return [self.scalars.get(oid) for oid in oids]

    async def walk(self, oid: str) -> List[Tuple[str, Any]]:
        self.requests.append(("walk", [oid]))
        if self.error:
            raise self.error
        if oid in self.failing_walks:
            raise MalformedResponse(f"{self.address}: walk {oid} rejected")
        return list(self.tables.get(oid, []))


def device_session(type_identifier: str = "1.3.6.1.4.1.14988.1", **kwargs) -> FakeSession:
    """A FakeSession for a healthy device with the given sysObjectID."""
    scalars = {
        SYSTEM.SYS_OBJECT_ID: type_identifier,
        SYSTEM.SYS_NAME: "edge-01",
        SYSTEM.SYS_DESCR: "RouterOS RB4011",
        SYSTEM.SYS_UPTIME: 123456,
    }
    scalars.update(kwargs.pop("scalars", {}))
    return FakeSession(scalars=scalars, **kwargs)


@pytest.fixture
def settings(tmp_path):
    return PollerSettings(workers=4, timeout=1.0, exchange_dir=str(tmp_path), start_method="fork")


@pytest.fixture
def template():
    return ConfigTemplate(snmp_version=2, snmp_community="public")


@pytest.fixture
def templates(template):
    return {"1": template}


@pytest.fixture
def host():
    return HostDescriptor(id=1, ip="192.0.2.1", template_id=1)


@pytest.fixture
def context(host):
    return HostContext(host=host, type_identifier="1.3.6.1.4.1.14988.1")


@pytest.fixture
def fleetpoll_logger():
    """The fleetpoll logger, restored to its prior level and handlers afterwards."""
    logger = logging.getLogger("fleetpoll")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers = saved[1]
    logger.propagate = saved[2]
