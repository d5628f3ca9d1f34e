"""
Fleet Poller - Ubiquiti Mappers.

airMAX access points advertise their own sysObjectID. Other Ubiquiti
radios report the generic 1.3.6.1.4.1.10002.1 (Frogfoot) identifier, so
UbiquitiIdentifier asks the device which UBNT MIB it implements:

    ubntRadioMode 2/3/4   -> airMAX access point
    ubntRadioMode 1       -> airMAX station
    airFiber radioEnable  -> airFiber backhaul
"""

import logging

from ..exceptions import UnsupportedDevice
from ..models import HostContext
from ..oids import UBIQUITI
from ..snmp.parsers import decode_int
from ..snmp.session import SnmpSession
from .base import BaseDeviceMapper
from .strategy import DeviceIdentifier, MapperStrategy


log = logging.getLogger("fleetpoll.mappers")


class UbiquitiAirMaxAccessPointMapper(BaseDeviceMapper):
    vendor = "ubiquiti"
    family = "airmax_ap"
    client_mac_oid = UBIQUITI.AIRMAX_STATION_MAC


class UbiquitiAirMaxStationMapper(BaseDeviceMapper):
    vendor = "ubiquiti"
    family = "airmax_station"


class UbiquitiAirFiberBackhaul(BaseDeviceMapper):
    vendor = "ubiquiti"
    family = "airfiber"


class UbiquitiIdentifier(DeviceIdentifier):
    """Pick the Ubiquiti mapper from the UBNT MIB objects the device answers."""

    async def identify_mapper(self, session: SnmpSession, context: HostContext) -> MapperStrategy:
        radio_mode, airfiber = await session.get_multiple([
            UBIQUITI.AIRMAX_RADIO_MODE,
            UBIQUITI.AIRFIBER_RADIO_ENABLE,
        ])

        mode = decode_int(radio_mode)
        if mode in UBIQUITI.AP_MODES:
            return MapperStrategy(UbiquitiAirMaxAccessPointMapper)
        if mode == UBIQUITI.MODE_STATION:
            return MapperStrategy(UbiquitiAirMaxStationMapper)
        if airfiber is not None:
            return MapperStrategy(UbiquitiAirFiberBackhaul)

        log.debug(f"{context.host.ip}: no UBNT MIB objects (radio mode={mode})")
        raise UnsupportedDevice(
            f"{context.host.ip}: Ubiquiti device {context.type_identifier} exposes no known UBNT MIB"
        )
