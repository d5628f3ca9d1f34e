"""
Fleet Poller - Device Mappers.

Pluggable decoding strategies, one per device family:
- base: BaseDeviceMapper (system, interfaces, addressing, neighbors)
- generic: fallback for unknown sysObjectIDs
- cambium, mimosa, mikrotik, etherwan, ubiquiti: vendor families
- dispatch: sysObjectID -> strategy table
"""

from .base import BaseDeviceMapper
from .generic import GenericDeviceMapper
from .strategy import MapperStrategy, DeviceIdentifier
from .ubiquiti import UbiquitiIdentifier
from .dispatch import MapperDispatchTable, DEFAULT_MAPPERS


__all__ = [
    'BaseDeviceMapper',
    'GenericDeviceMapper',
    'MapperStrategy',
    'DeviceIdentifier',
    'UbiquitiIdentifier',
    'MapperDispatchTable',
    'DEFAULT_MAPPERS',
]
