"""Fleet Poller - MikroTik RouterOS Mapper."""

from ..oids import MIKROTIK
from .base import BaseDeviceMapper


class MikroTikMapper(BaseDeviceMapper):
    """RouterOS devices; wireless registrations are reported as clients."""
    vendor = "mikrotik"
    family = "routeros"
    client_mac_oid = MIKROTIK.WL_RTAB_ADDR
