"""Fleet Poller - EtherWAN Switch Mapper."""

from .base import BaseDeviceMapper


class EtherwanSwitch(BaseDeviceMapper):
    vendor = "etherwan"
    family = "switch"
