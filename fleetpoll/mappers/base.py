"""
Fleet Poller - Base Device Mapper.

A mapper turns an open SnmpSession for a known device family into a
Device record. BaseDeviceMapper collects what every SNMP agent is
expected to expose; vendor families subclass it and extend map_extra().

Collected data:
- System group (sysName, sysDescr, sysLocation, sysContact, sysUpTime) - required
- IF-MIB ifTable - required
- IP-MIB ipAddrTable -> Interface.ip_addresses
- IP-MIB ipNetToMediaTable -> Interface.connected_l3
- BRIDGE-MIB forwarding table -> Interface.connected_l2
- Vendor client table (client_mac_oid) -> Device.wireless_clients

Required queries propagate their PollError; optional tables that fail
are logged and left empty.
"""

import ipaddress
import logging
from typing import Dict, List, Optional

from ..exceptions import MalformedResponse, PollError
from ..models import Device, HostContext, Interface, InterfaceStatus
from ..oids import SYSTEM, INTERFACES, IP, ARP, BRIDGE
from ..snmp.parsers import (
    decode_int, decode_mac, decode_string, ip_from_oid_index,
    mac_from_oid_index, oid_index,
)
from ..snmp.session import SnmpSession, WalkResult


log = logging.getLogger("fleetpoll.mappers")


class BaseDeviceMapper:
    """
    Common SNMP mapping shared by every device family.

    Class attributes describe the family and are copied into the record:
        vendor: Vendor name
        family: Product family
        client_mac_oid: Table whose values are associated client MACs
    """
    vendor: str = ""
    family: str = ""
    client_mac_oid: Optional[str] = None

    def __init__(self, session: SnmpSession, context: HostContext, network_site: bool = False):
        self.session = session
        self.context = context
        self.network_site = network_site

    @property
    def name(self) -> str:
        return type(self).__name__

    async def map(self) -> Device:
        """Query the device and build its record."""
        host = self.context.host
        device = Device(
            id=host.id,
            ip_address=host.ip,
            type_identifier=self.context.type_identifier,
            mapper=self.name,
            vendor=self.vendor,
            family=self.family,
            network_site=self.network_site,
        )

        await self.map_system(device)

        interfaces = await self.map_interfaces()
        await self.map_ip_addresses(interfaces)
        await self.map_arp(interfaces)
        await self.map_bridge_table(interfaces)
        device.interfaces = [interfaces[i] for i in sorted(interfaces)]

        await self.map_extra(device)
        return device

    async def map_extra(self, device: Device) -> None:
        """Vendor hook; the default collects client MACs if the family has a client table."""
        if self.client_mac_oid:
            device.wireless_clients = await self.collect_client_macs(self.client_mac_oid)

    # =========================================================================
    # Query helpers
    # =========================================================================

    async def optional_walk(self, oid: str) -> WalkResult:
        """Walk a table the device may not implement."""
        try:
            return await self.session.walk(oid)
        except PollError as e:
            log.debug(f"{self.context.host.ip}: {self.name} skipped {oid}: {e}")
            return []

    async def collect_client_macs(self, oid: str) -> List[str]:
        """Walk a table whose values are client MAC addresses."""
        macs = []
        for _, value in await self.optional_walk(oid):
            mac = decode_mac(value)
            if mac and mac not in macs:
                macs.append(mac)
        return macs

    # =========================================================================
    # Collectors
    # =========================================================================

    async def map_system(self, device: Device) -> None:
        values = await self.session.get_multiple([
            SYSTEM.SYS_NAME,
            SYSTEM.SYS_DESCR,
            SYSTEM.SYS_LOCATION,
            SYSTEM.SYS_CONTACT,
            SYSTEM.SYS_UPTIME,
        ])
        if all(value is None for value in values):
            raise MalformedResponse(f"{self.context.host.ip}: system group not available")

        device.sys_name = decode_string(values[0]) or None
        device.sys_descr = decode_string(values[1]) or None
        device.sys_location = decode_string(values[2]) or None
        device.sys_contact = decode_string(values[3]) or None
        device.uptime_ticks = decode_int(values[4])

    async def map_interfaces(self) -> Dict[int, Interface]:
        """
        Build interfaces keyed by ifIndex.

        ifDescr is required; the remaining columns are best effort.
        """
        interfaces: Dict[int, Interface] = {}

        for oid, value in await self.session.walk(INTERFACES.IF_DESCR):
            index = oid_index(oid, INTERFACES.IF_DESCR)
            if len(index) != 1:
                continue
            interfaces[index[0]] = Interface(if_index=index[0], name=decode_string(value))

        for oid, value in await self.optional_walk(INTERFACES.IF_TYPE):
            iface = _row(interfaces, oid, INTERFACES.IF_TYPE)
            if iface:
                iface.if_type = decode_int(value)

        for oid, value in await self.optional_walk(INTERFACES.IF_SPEED):
            iface = _row(interfaces, oid, INTERFACES.IF_SPEED)
            speed = decode_int(value)
            if iface and speed is not None:
                iface.speed_mbps = speed // 1_000_000

        for oid, value in await self.optional_walk(INTERFACES.IF_PHYS_ADDRESS):
            iface = _row(interfaces, oid, INTERFACES.IF_PHYS_ADDRESS)
            if iface:
                iface.mac_address = decode_mac(value)

        for oid, value in await self.optional_walk(INTERFACES.IF_OPER_STATUS):
            iface = _row(interfaces, oid, INTERFACES.IF_OPER_STATUS)
            if iface:
                iface.status = InterfaceStatus.from_oper_status(decode_int(value))

        return interfaces

    async def map_ip_addresses(self, interfaces: Dict[int, Interface]) -> None:
        """Attach ipAddrTable entries to their interfaces in CIDR form."""
        if_indexes: Dict[str, int] = {}
        for oid, value in await self.optional_walk(IP.AD_ENT_IF_INDEX):
            address = ip_from_oid_index(oid_index(oid, IP.AD_ENT_IF_INDEX))
            if_index = decode_int(value)
            if address and if_index is not None:
                if_indexes[address] = if_index

        if not if_indexes:
            return

        masks: Dict[str, str] = {}
        for oid, value in await self.optional_walk(IP.AD_ENT_NET_MASK):
            address = ip_from_oid_index(oid_index(oid, IP.AD_ENT_NET_MASK))
            if address:
                masks[address] = _decode_mask(value)

        for address, if_index in if_indexes.items():
            iface = interfaces.get(if_index)
            if iface is None:
                continue
            prefix = _prefix_length(masks.get(address))
            iface.ip_addresses.append(f"{address}/{prefix}")

    async def map_arp(self, interfaces: Dict[int, Interface]) -> None:
        """ipNetToMediaPhysAddress: index ifIndex.a.b.c.d, value MAC."""
        for oid, value in await self.optional_walk(ARP.NET_TO_MEDIA_PHYS_ADDRESS):
            index = oid_index(oid, ARP.NET_TO_MEDIA_PHYS_ADDRESS)
            if len(index) != 5:
                continue
            iface = interfaces.get(index[0])
            mac = decode_mac(value)
            address = ip_from_oid_index(index)
            if iface is None or not mac or not address:
                continue
            entry = {'mac': mac, 'ip': address}
            if entry not in iface.connected_l3:
                iface.connected_l3.append(entry)

    async def map_bridge_table(self, interfaces: Dict[int, Interface]) -> None:
        """Resolve learned MACs through bridge port -> ifIndex."""
        fdb = await self.optional_walk(BRIDGE.TP_FDB_PORT)
        if not fdb:
            return

        port_to_if_index: Dict[int, int] = {}
        for oid, value in await self.optional_walk(BRIDGE.BASE_PORT_IF_INDEX):
            port = oid_index(oid, BRIDGE.BASE_PORT_IF_INDEX)
            if_index = decode_int(value)
            if len(port) == 1 and if_index is not None:
                port_to_if_index[port[0]] = if_index

        for oid, value in fdb:
            mac = mac_from_oid_index(oid_index(oid, BRIDGE.TP_FDB_PORT))
            port = decode_int(value)
            if not mac or port is None:
                continue
            iface = interfaces.get(port_to_if_index.get(port, port))
            if iface is None or mac == iface.mac_address:
                continue
            if mac not in iface.connected_l2:
                iface.connected_l2.append(mac)


def _row(interfaces: Dict[int, Interface], oid: str, base: str) -> Optional[Interface]:
    index = oid_index(oid, base)
    if len(index) != 1:
        return None
    return interfaces.get(index[0])


def _decode_mask(value) -> str:
    if hasattr(value, 'asOctets') and len(value.asOctets()) == 4:
        return '.'.join(str(b) for b in value.asOctets())
    return decode_string(value)


def _prefix_length(mask: Optional[str]) -> int:
    """Netmask to prefix length; host route (32) when unknown."""
    if not mask:
        return 32
    try:
        return ipaddress.IPv4Network(f"0.0.0.0/{mask}").prefixlen
    except ValueError:
        return 32
