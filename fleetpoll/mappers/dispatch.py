"""
Fleet Poller - Mapper Dispatch Table.

Maps a device's type identifier (normalized sysObjectID) to the strategy
that decodes it. Several identifiers may share a mapper; unknown
identifiers fall back to GenericDeviceMapper, flagged when the host is a
network site.

Usage:
    table = MapperDispatchTable()

    # Pure lookup - may return a DeviceIdentifier
    entry = table.select("1.3.6.1.4.1.14988.1", "network_sites")

    # Full resolution, running the disambiguation request if needed
    strategy = await table.resolve(session, context)
    device = await strategy.create(session, context).map()
"""

from typing import Dict, Mapping, Optional, Type, Union

from ..models import HostContext, NETWORK_SITES
from ..snmp.session import SnmpSession
from .base import BaseDeviceMapper
from .cambium import (
    CambiumCanopyPMPAccessPointMapper,
    CambiumEpmpAccessPointMapper,
    CambiumPTP250Backhaul,
    CambiumPTP500Backhaul,
    CambiumPTP600Backhaul,
    CambiumPTP650Backhaul,
    CambiumPTP670Backhaul,
    CambiumPTP700Backhaul,
    CambiumPTP800Backhaul,
)
from .etherwan import EtherwanSwitch
from .generic import GenericDeviceMapper
from .mikrotik import MikroTikMapper
from .mimosa import MimosaAxAccessPoint, MimosaBxBackhaul
from .strategy import DeviceIdentifier, MapperStrategy
from .ubiquiti import UbiquitiAirMaxAccessPointMapper, UbiquitiIdentifier


DispatchEntry = Union[Type[BaseDeviceMapper], DeviceIdentifier]


DEFAULT_MAPPERS: Dict[str, DispatchEntry] = {
    "1.3.6.1.4.1.161.19.250.256": CambiumCanopyPMPAccessPointMapper,
    "1.3.6.1.4.1.17713.21": CambiumEpmpAccessPointMapper,
    "1.3.6.1.4.1.17713.21.1.1.2": CambiumEpmpAccessPointMapper,
    "1.3.6.1.4.1.41112.1.4": UbiquitiAirMaxAccessPointMapper,
    "1.3.6.1.4.1.17713.7": CambiumPTP650Backhaul,
    "1.3.6.1.4.1.17713.6": CambiumPTP600Backhaul,
    "1.3.6.1.4.1.17713.250": CambiumPTP250Backhaul,
    "1.3.6.1.4.1.17713.5": CambiumPTP500Backhaul,
    "1.3.6.1.4.1.17713.11": CambiumPTP670Backhaul,
    "1.3.6.1.4.1.17713.9": CambiumPTP700Backhaul,
    "1.3.6.1.4.1.17713.8": CambiumPTP800Backhaul,
    # Ubiquiti doesn't separate its devices by sysObjectID
    "1.3.6.1.4.1.10002.1": UbiquitiIdentifier(),
    "1.3.6.1.4.1.43356.1.1.1": MimosaBxBackhaul,  # B5, B5c, B11, B5-Lite (FW 1.4.5 and older)
    "1.3.6.1.4.1.43356.1.1.2": MimosaBxBackhaul,  # B5-Lite
    "1.3.6.1.4.1.43356.1.1.3": MimosaAxAccessPoint,  # A5-14, A5-18, A5c (FW 2.3+)
    "1.3.6.1.4.1.2736.1.1": EtherwanSwitch,
    "1.3.6.1.4.1.14988.1": MikroTikMapper,
}


class MapperDispatchTable:
    """
    Exact-match dispatch from type identifier to mapper strategy.

    Holds no mutable state; safe to share and to pickle into workers.
    """

    def __init__(
        self,
        mappers: Optional[Mapping[str, DispatchEntry]] = None,
        fallback: Type[BaseDeviceMapper] = GenericDeviceMapper,
    ):
        self.mappers: Dict[str, DispatchEntry] = dict(DEFAULT_MAPPERS if mappers is None else mappers)
        self.fallback = fallback

    def __contains__(self, type_identifier: str) -> bool:
        return type_identifier in self.mappers

    def select(self, type_identifier: str, category: str = "") -> Union[MapperStrategy, DeviceIdentifier]:
        """
        Look up the entry for an identifier.

        Returns a DeviceIdentifier for identifiers that need disambiguation,
        otherwise a MapperStrategy (the flagged fallback for unknown ones).
        """
        entry = self.mappers.get(type_identifier)
        if entry is None:
            return MapperStrategy(self.fallback, network_site=(category == NETWORK_SITES))
        if isinstance(entry, DeviceIdentifier):
            return entry
        return MapperStrategy(entry)

    async def resolve(self, session: SnmpSession, context: HostContext) -> MapperStrategy:
        """Select a strategy, running the disambiguation request when needed."""
        entry = self.select(context.type_identifier, context.category)
        if isinstance(entry, DeviceIdentifier):
            return await entry.identify_mapper(session, context)
        return entry
