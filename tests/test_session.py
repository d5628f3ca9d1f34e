"""Tests for SnmpSession queries against a patched pysnmp layer."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest
from pysnmp.proto.rfc1902 import Integer
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchObject

from fleetpoll.exceptions import MalformedResponse, QueryTimeout, Unreachable
from fleetpoll.models import SnmpVersion
from fleetpoll.snmp import session as session_module
from fleetpoll.snmp.session import SessionConfig, SnmpSession


IF_DESCR = "1.3.6.1.2.1.2.2.1.2"


def ok(*var_binds):
    return (None, 0, 0, list(var_binds))


def make_session(version=SnmpVersion.V2C, timeout=1.0, retries=0):
    config = SessionConfig(version=version, community="public", timeout=timeout, retries=retries)
    return SnmpSession("192.0.2.1", config)


@pytest.fixture
def pysnmp_layer():
    """Patch transport and engine so no socket is opened."""
    with patch.object(session_module.UdpTransportTarget, "create", new=AsyncMock(return_value=Mock())), \
            patch.object(session_module, "SnmpEngine") as engine:
        yield engine


class TestGet:

    @pytest.mark.asyncio
    async def test_get_value(self, pysnmp_layer):
        session = make_session()
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=ok(("1.3.6.1.2.1.1.5.0", "edge-01")))):
            assert await session.get("1.3.6.1.2.1.1.5.0") == "edge-01"

    @pytest.mark.asyncio
    async def test_missing_object_is_malformed(self, pysnmp_layer):
        session = make_session()
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=ok(("1.3.6.1.2.1.1.5.0", NoSuchObject(""))))):
            with pytest.raises(MalformedResponse):
                await session.get("1.3.6.1.2.1.1.5.0")

    @pytest.mark.asyncio
    async def test_error_indication_is_unreachable(self, pysnmp_layer):
        session = make_session()
        reply = ("No SNMP response received before timeout", 0, 0, [])
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=reply)):
            with pytest.raises(Unreachable):
                await session.get("1.3.6.1.2.1.1.2.0")

    @pytest.mark.asyncio
    async def test_stalled_query_times_out(self, pysnmp_layer, monkeypatch):
        monkeypatch.setattr(session_module, "QUERY_GRACE", 0.0)
        session = make_session(timeout=0.01)

        async def stalled(*args, **kwargs):
            await asyncio.sleep(5)

        with patch.object(session_module, "get_cmd", new=stalled):
            with pytest.raises(QueryTimeout):
                await session.get("1.3.6.1.2.1.1.2.0")

    @pytest.mark.asyncio
    async def test_transport_failure_is_unreachable(self):
        session = make_session()
        failing = AsyncMock(side_effect=OSError("Name or service not known"))
        with patch.object(session_module.UdpTransportTarget, "create", new=failing):
            with pytest.raises(Unreachable):
                await session.get("1.3.6.1.2.1.1.2.0")

    @pytest.mark.asyncio
    async def test_get_multiple_marks_missing_as_none(self, pysnmp_layer):
        session = make_session()
        reply = ok(("1.3.6.1.2.1.1.5.0", "edge-01"), ("1.3.6.1.2.1.1.6.0", NoSuchObject("")))
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=reply)) as get_cmd:
            values = await session.get_multiple(["1.3.6.1.2.1.1.5.0", "1.3.6.1.2.1.1.6.0"])

        assert values == ["edge-01", None]
        get_cmd.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_v1_no_such_name_yields_all_none(self, pysnmp_layer):
        session = make_session(version=SnmpVersion.V1)
        reply = (None, Integer(2), 1, [])
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=reply)):
            assert await session.get_multiple(["1.3.6.1.2.1.1.5.0", "1.3.6.1.2.1.1.6.0"]) == [None, None]

    @pytest.mark.asyncio
    async def test_other_error_status_is_malformed(self, pysnmp_layer):
        session = make_session()
        reply = (None, Integer(5), 1, [])
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=reply)):
            with pytest.raises(MalformedResponse):
                await session.get_multiple(["1.3.6.1.2.1.1.5.0"])


class TestWalk:

    @pytest.mark.asyncio
    async def test_bulk_walk_stops_at_table_boundary(self, pysnmp_layer):
        session = make_session()
        pages = [
            ok((f"{IF_DESCR}.1", "ether1"), (f"{IF_DESCR}.2", "ether2")),
            ok((f"{IF_DESCR}.3", "wlan1"), ("1.3.6.1.2.1.2.2.1.3.1", 6)),
        ]
        with patch.object(session_module, "bulk_cmd", new=AsyncMock(side_effect=pages)) as bulk_cmd:
            rows = await session.walk(IF_DESCR)

        assert rows == [(f"{IF_DESCR}.1", "ether1"), (f"{IF_DESCR}.2", "ether2"), (f"{IF_DESCR}.3", "wlan1")]
        assert bulk_cmd.await_count == 2

    @pytest.mark.asyncio
    async def test_walk_does_not_match_sibling_prefix(self, pysnmp_layer):
        session = make_session()
        # 1.3.6.1.2.1.2.2.1.20 shares a string prefix with ifDescr but is another column
        reply = ok(("1.3.6.1.2.1.2.2.1.20.1", 0))
        with patch.object(session_module, "bulk_cmd", new=AsyncMock(return_value=reply)):
            assert await session.walk(IF_DESCR) == []

    @pytest.mark.asyncio
    async def test_walk_stops_at_end_of_mib(self, pysnmp_layer):
        session = make_session()
        reply = ok((f"{IF_DESCR}.1", "ether1"), (f"{IF_DESCR}.2", EndOfMibView("")))
        with patch.object(session_module, "bulk_cmd", new=AsyncMock(return_value=reply)):
            assert await session.walk(IF_DESCR) == [(f"{IF_DESCR}.1", "ether1")]

    @pytest.mark.asyncio
    async def test_v1_uses_getnext(self, pysnmp_layer):
        session = make_session(version=SnmpVersion.V1)
        pages = [ok((f"{IF_DESCR}.1", "eth0")), (None, Integer(2), 1, [])]
        with patch.object(session_module, "next_cmd", new=AsyncMock(side_effect=pages)) as next_cmd, \
                patch.object(session_module, "bulk_cmd", new=AsyncMock()) as bulk_cmd:
            rows = await session.walk(IF_DESCR)

        assert rows == [(f"{IF_DESCR}.1", "eth0")]
        assert next_cmd.await_count == 2
        bulk_cmd.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_walk_iteration_limit(self, pysnmp_layer):
        session = make_session()
        session.max_iterations = 3
        counter = iter(range(1, 100))

        async def endless(*args, **kwargs):
            return ok((f"{IF_DESCR}.{next(counter)}", "x"))

        with patch.object(session_module, "bulk_cmd", new=endless):
            rows = await session.walk(IF_DESCR)

        assert len(rows) == 3


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes_dispatcher(self, pysnmp_layer):
        with patch.object(session_module, "get_cmd", new=AsyncMock(return_value=ok(("1.3.6.1.2.1.1.5.0", "x")))):
            async with make_session() as session:
                await session.get("1.3.6.1.2.1.1.5.0")

        pysnmp_layer.return_value.close_dispatcher.assert_called_once()

    def test_close_without_queries(self):
        session = make_session()
        session.close()
        session.close()
