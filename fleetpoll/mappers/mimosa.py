"""Fleet Poller - Mimosa Networks Mappers."""

from .base import BaseDeviceMapper


class MimosaBxBackhaul(BaseDeviceMapper):
    """B5, B5c, B11 and B5-Lite backhauls."""
    vendor = "mimosa"
    family = "bx_backhaul"


class MimosaAxAccessPoint(BaseDeviceMapper):
    """A5-14, A5-18 and A5c access points."""
    vendor = "mimosa"
    family = "ax_ap"
