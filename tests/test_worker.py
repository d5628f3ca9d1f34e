"""Tests for the chunk worker: per-host failure containment."""

import json
import logging
import sys

import pytest

from fleetpoll import worker as worker_module
from fleetpoll.config import PollerSettings
from fleetpoll.exceptions import Unreachable
from fleetpoll.exchange import ResultExchange
from fleetpoll.models import HostDescriptor
from fleetpoll.oids import UBIQUITI

from .conftest import FakeSession, device_session


def make_hosts(count, template_id="1"):
    return [HostDescriptor(id=i, ip=f"192.0.2.{i}", template_id=template_id) for i in range(1, count + 1)]


@pytest.fixture
def sessions(monkeypatch):
    """Route build_session to FakeSessions keyed by host address."""
    by_address = {}

    def fake_build_session(host, template, settings):
        session = by_address.get(host.ip) or device_session(address=host.ip)
        by_address[host.ip] = session
        return session

    monkeypatch.setattr(worker_module, "build_session", fake_build_session)
    return by_address


class TestPollHost:

    @pytest.mark.asyncio
    async def test_success(self, sessions, templates, settings):
        host = make_hosts(1)[0]
        device = await worker_module.poll_host(host, templates, settings)

        assert device.id == 1
        assert device.mapper == "MikroTikMapper"
        assert sessions[host.ip].closed

    @pytest.mark.asyncio
    async def test_unreachable_returns_none_and_closes(self, sessions, templates, settings):
        host = make_hosts(1)[0]
        sessions[host.ip] = FakeSession(address=host.ip, error=Unreachable("no response"))

        assert await worker_module.poll_host(host, templates, settings) is None
        assert sessions[host.ip].closed

    @pytest.mark.asyncio
    async def test_missing_template(self, sessions, templates, settings):
        host = make_hosts(1, template_id="404")[0]
        assert await worker_module.poll_host(host, templates, settings) is None
        assert host.ip not in sessions

    @pytest.mark.asyncio
    async def test_unsupported_ubiquiti(self, sessions, templates, settings):
        host = make_hosts(1)[0]
        sessions[host.ip] = device_session("1.3.6.1.4.1.10002.1", address=host.ip)

        assert await worker_module.poll_host(host, templates, settings) is None

    @pytest.mark.asyncio
    async def test_ubiquiti_station(self, sessions, templates, settings):
        host = make_hosts(1)[0]
        sessions[host.ip] = device_session(
            "1.3.6.1.4.1.10002.1", address=host.ip, scalars={UBIQUITI.AIRMAX_RADIO_MODE: 1},
        )

        device = await worker_module.poll_host(host, templates, settings)
        assert device.mapper == "UbiquitiAirMaxStationMapper"

    @pytest.mark.asyncio
    async def test_unexpected_mapper_error_contained(self, sessions, templates, settings, monkeypatch, caplog):
        host = make_hosts(1)[0]

        async def broken_map(self):
            raise KeyError("ifIndex")

        monkeypatch.setattr("fleetpoll.mappers.mikrotik.MikroTikMapper.map", broken_map)

        with caplog.at_level(logging.DEBUG, logger="fleetpoll.worker"):
            assert await worker_module.poll_host(host, templates, settings) is None

        assert "192.0.2.1" in caplog.text
        assert sessions[host.ip].closed

    @pytest.mark.asyncio
    async def test_fallback_for_unknown_network_site(self, sessions, templates, settings):
        host = HostDescriptor(id=5, ip="192.0.2.5", template_id=1, type="network_sites")
        sessions[host.ip] = device_session("9999.0.0", address=host.ip)

        device = await worker_module.poll_host(host, templates, settings)

        assert device.mapper == "GenericDeviceMapper"
        assert device.network_site is True


class TestPollChunk:

    @pytest.mark.asyncio
    async def test_failing_host_is_skipped(self, sessions, templates, settings):
        hosts = make_hosts(3)
        sessions[hosts[1].ip] = FakeSession(address=hosts[1].ip, error=Unreachable("no response"))

        records = await worker_module.poll_chunk(hosts, templates, settings)

        assert [r["id"] for r in records] == [1, 3]

    @pytest.mark.asyncio
    async def test_hosts_polled_in_order(self, sessions, templates, settings, monkeypatch):
        order = []
        real = worker_module.poll_host

        async def tracking(host, *args, **kwargs):
            order.append(host.id)
            return await real(host, *args, **kwargs)

        monkeypatch.setattr(worker_module, "poll_host", tracking)
        await worker_module.poll_chunk(make_hosts(4), templates, settings)

        assert order == [1, 2, 3, 4]


class TestRunWorker:

    def test_writes_slot(self, sessions, templates, settings, tmp_path):
        exchange = ResultExchange.create(tmp_path)
        worker_module.run_worker(2, make_hosts(2), templates, settings, exchange)

        records = json.loads(exchange.slot_path(2).read_text())
        assert [r["id"] for r in records] == [1, 2]

    def test_empty_chunk_does_nothing(self, templates, settings, tmp_path):
        exchange = ResultExchange.create(tmp_path)
        worker_module.run_worker(0, [], templates, settings, exchange)

        assert not exchange.slot_path(0).exists()

    def test_debug_raises_log_level(self, sessions, templates, tmp_path, fleetpoll_logger):
        handler = logging.NullHandler()
        fleetpoll_logger.handlers = [handler]
        settings = PollerSettings(debug=True, exchange_dir=str(tmp_path))

        worker_module.run_worker(0, make_hosts(1), templates, settings, ResultExchange.create(tmp_path))

        assert fleetpoll_logger.level == logging.DEBUG
        assert fleetpoll_logger.handlers == [handler]

    def test_debug_installs_handler_when_none_inherited(self, sessions, templates, tmp_path, fleetpoll_logger):
        fleetpoll_logger.handlers = []
        settings = PollerSettings(debug=True, exchange_dir=str(tmp_path))

        worker_module.run_worker(0, make_hosts(1), templates, settings, ResultExchange.create(tmp_path))

        assert fleetpoll_logger.level == logging.DEBUG
        assert len(fleetpoll_logger.handlers) == 1
        assert fleetpoll_logger.handlers[0].stream is sys.stderr
