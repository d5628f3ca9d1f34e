"""
Fleet Poller - Cambium Networks Mappers.

Canopy PMP and ePMP access points report their registered subscriber
modules; the PTP backhaul families only need the common mapping.
"""

from ..oids import CAMBIUM
from .base import BaseDeviceMapper


class CambiumCanopyPMPAccessPointMapper(BaseDeviceMapper):
    vendor = "cambium"
    family = "canopy_pmp_ap"
    client_mac_oid = CAMBIUM.CANOPY_LINK_PHYS_ADDRESS


class CambiumEpmpAccessPointMapper(BaseDeviceMapper):
    vendor = "cambium"
    family = "epmp_ap"


class CambiumPTPBackhaul(BaseDeviceMapper):
    """Point-to-point backhaul radios."""
    vendor = "cambium"
    family = "ptp"


class CambiumPTP250Backhaul(CambiumPTPBackhaul):
    family = "ptp250"


class CambiumPTP500Backhaul(CambiumPTPBackhaul):
    family = "ptp500"


class CambiumPTP600Backhaul(CambiumPTPBackhaul):
    family = "ptp600"


class CambiumPTP650Backhaul(CambiumPTPBackhaul):
    family = "ptp650"


class CambiumPTP670Backhaul(CambiumPTPBackhaul):
    family = "ptp670"


class CambiumPTP700Backhaul(CambiumPTPBackhaul):
    family = "ptp700"


class CambiumPTP800Backhaul(CambiumPTPBackhaul):
    family = "ptp800"
