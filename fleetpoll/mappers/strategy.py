"""
Fleet Poller - Mapper Strategies.

The dispatch table resolves a type identifier to one of two variants:

- MapperStrategy: a concrete mapper class plus its options
- DeviceIdentifier: a disambiguation step that needs one more SNMP
  exchange before it can name the MapperStrategy to use
"""

from dataclasses import dataclass
from typing import Type

from ..models import HostContext
from ..snmp.session import SnmpSession
from .base import BaseDeviceMapper


@dataclass(frozen=True)
class MapperStrategy:
    """A mapper class and the options it is constructed with."""
    mapper: Type[BaseDeviceMapper]
    network_site: bool = False

    @property
    def name(self) -> str:
        return self.mapper.__name__

    def create(self, session: SnmpSession, context: HostContext) -> BaseDeviceMapper:
        return self.mapper(session, context, network_site=self.network_site)


class DeviceIdentifier:
    """
    Disambiguation step for vendors sharing one sysObjectID.

    Subclasses perform exactly one extra request against the open session
    and return the strategy to use, or raise UnsupportedDevice.
    """

    async def identify_mapper(self, session: SnmpSession, context: HostContext) -> MapperStrategy:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))
