"""
Fleet Poller - SNMP OID Constants.

Centralized OID definitions used by identification and the device mappers.

Organization:
- SNMPv2-MIB: System group (sysObjectID is the dispatch key)
- IF-MIB: Interface table
- IP-MIB: Address table and ARP cache (ipNetToMedia)
- BRIDGE-MIB: Transparent bridge forwarding table
- Vendor MIBs: wireless client tables and Ubiquiti identification

Numeric OIDs are used throughout so no MIB compilation is needed.
"""


# =============================================================================
# SNMPv2-MIB - System Group
# =============================================================================

class SYSTEM:
    """
    SNMPv2-MIB System Group OIDs.

    Base: 1.3.6.1.2.1.1 (iso.org.dod.internet.mgmt.mib-2.system)
    """
    BASE = "1.3.6.1.2.1.1"

    SYS_DESCR = "1.3.6.1.2.1.1.1.0"           # System description string
    SYS_OBJECT_ID = "1.3.6.1.2.1.1.2.0"       # Vendor's authoritative ID
    SYS_UPTIME = "1.3.6.1.2.1.1.3.0"          # Time since re-init (hundredths)
    SYS_CONTACT = "1.3.6.1.2.1.1.4.0"         # Contact person
    SYS_NAME = "1.3.6.1.2.1.1.5.0"            # Administratively assigned name
    SYS_LOCATION = "1.3.6.1.2.1.1.6.0"        # Physical location


# =============================================================================
# IF-MIB - Interface Table
# =============================================================================

class INTERFACES:
    """
    IF-MIB ifTable columns.

    Index: ifIndex (integer), the final OID component.
    """
    IF_ENTRY = "1.3.6.1.2.1.2.2.1"

    IF_DESCR = "1.3.6.1.2.1.2.2.1.2"          # ifDescr (DisplayString)
    IF_TYPE = "1.3.6.1.2.1.2.2.1.3"           # ifType (IANAifType)
    IF_SPEED = "1.3.6.1.2.1.2.2.1.5"          # ifSpeed (Gauge32, bps)
    IF_PHYS_ADDRESS = "1.3.6.1.2.1.2.2.1.6"   # ifPhysAddress (MAC)
    IF_OPER_STATUS = "1.3.6.1.2.1.2.2.1.8"    # ifOperStatus (1=up,2=down,etc.)


# =============================================================================
# IP-MIB - Addresses and ARP
# =============================================================================

class IP:
    """
    IP-MIB ipAddrTable.

    Index: the IPv4 address itself (4 OID components).
    """
    AD_ENT_IF_INDEX = "1.3.6.1.2.1.4.20.1.2"  # ipAdEntIfIndex
    AD_ENT_NET_MASK = "1.3.6.1.2.1.4.20.1.3"  # ipAdEntNetMask


class ARP:
    """
    IP-MIB ipNetToMediaTable (ARP cache).

    Index: ipNetToMediaIfIndex.a.b.c.d
    """
    NET_TO_MEDIA_PHYS_ADDRESS = "1.3.6.1.2.1.4.22.1.2"   # MAC address (binary)


# =============================================================================
# BRIDGE-MIB - Forwarding Database
# =============================================================================

class BRIDGE:
    """
    BRIDGE-MIB transparent bridging tables.

    dot1dTpFdbPort is indexed by the MAC (6 OID components) and holds a
    bridge port number; dot1dBasePortIfIndex maps bridge port -> ifIndex.
    """
    BASE_PORT_IF_INDEX = "1.3.6.1.2.1.17.1.4.1.2"
    TP_FDB_PORT = "1.3.6.1.2.1.17.4.3.1.2"


# =============================================================================
# Vendor MIBs
# =============================================================================

class UBIQUITI:
    """
    Ubiquiti UBNT-MIB objects.

    Devices reporting the generic 1.3.6.1.4.1.10002.1 sysObjectID are told
    apart by which of these scalars they answer.
    """
    AIRMAX_RADIO_MODE = "1.3.6.1.4.1.41112.1.4.1.1.2.1"   # ubntRadioMode, first radio
    AIRFIBER_RADIO_ENABLE = "1.3.6.1.4.1.41112.1.3.1.1.2.1"  # airFiber radioEnable
    AIRMAX_STATION_MAC = "1.3.6.1.4.1.41112.1.4.7.1.1"    # ubntStaMac (AP client table)

    # ubntRadioMode values
    MODE_STATION = 1
    MODE_AP = 2
    MODE_AP_REPEATER = 3
    MODE_AP_WDS = 4
    AP_MODES = (MODE_AP, MODE_AP_REPEATER, MODE_AP_WDS)


class MIKROTIK:
    """MIKROTIK-MIB wireless registration table."""
    WL_RTAB_ADDR = "1.3.6.1.4.1.14988.1.1.1.2.1.1"        # mtxrWlRtabAddr


class CAMBIUM:
    """Cambium (Motorola WHISP) access point tables."""
    CANOPY_LINK_PHYS_ADDRESS = "1.3.6.1.4.1.161.19.3.1.4.1.3"  # linkPhysAddress
