"""
Fleet Poller - Generic Device Mapper.

Fallback for any sysObjectID without a dedicated mapper. Network-site
hosts are mapped the same way but flagged, so downstream can tell site
infrastructure apart from other generic equipment.
"""

from .base import BaseDeviceMapper


class GenericDeviceMapper(BaseDeviceMapper):
    """Standard MIB-II / BRIDGE-MIB mapping with no vendor extras."""
    vendor = "generic"
    family = "generic"
