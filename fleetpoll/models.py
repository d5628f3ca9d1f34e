"""
Fleet Poller - Data Models.

Input models (pydantic) describe the work handed to the poller:
- HostDescriptor: one device to poll
- ConfigTemplate: shared SNMP configuration referenced by many hosts
- SnmpOverrides: per-host values that win over the template

Output models (dataclasses) describe what the mappers produce:
- Interface: one IF-MIB interface with its addressing and neighbors
- Device: the canonical record returned for every mapped host

Design Principles:
- Input is immutable once validated
- Field names match the upstream work payload
- Output is serializable to JSON via to_dict()
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Dict, Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


NETWORK_SITES = "network_sites"


class SnmpVersion(str, Enum):
    """SNMP protocol versions."""
    V1 = "1"
    V2C = "2c"
    V3 = "3"

    @classmethod
    def parse(cls, value: Union[int, str, None]) -> "SnmpVersion":
        """
        Normalize a configured version.

        2 / "2" / "2c" select v2c, 3 selects v3, anything else is v1.
        """
        text = str(value).strip().lower() if value is not None else ""
        if text in ("2", "2c"):
            return cls.V2C
        if text == "3":
            return cls.V3
        return cls.V1


class InterfaceStatus(str, Enum):
    """Interface operational status."""
    UP = "up"
    DOWN = "down"
    TESTING = "testing"
    DORMANT = "dormant"
    NOT_PRESENT = "not_present"
    LOWER_LAYER_DOWN = "lower_layer_down"
    UNKNOWN = "unknown"

    @classmethod
    def from_oper_status(cls, value: Optional[int]) -> "InterfaceStatus":
        return _OPER_STATUS.get(value, cls.UNKNOWN)


_OPER_STATUS = {
    1: InterfaceStatus.UP,
    2: InterfaceStatus.DOWN,
    3: InterfaceStatus.TESTING,
    5: InterfaceStatus.DORMANT,
    6: InterfaceStatus.NOT_PRESENT,
    7: InterfaceStatus.LOWER_LAYER_DOWN,
}


# =============================================================================
# Input Models
# =============================================================================

class SnmpOverrides(BaseModel):
    """Per-host SNMP settings. Unset (None) fields fall back to the template."""

    # Numeric communities and passphrases arrive as JSON numbers
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    snmp_version: Optional[Union[int, str]] = None
    snmp_community: Optional[str] = None
    snmp3_sec_level: Optional[str] = None
    snmp3_auth_protocol: Optional[str] = None
    snmp3_auth_passphrase: Optional[str] = None
    snmp3_priv_protocol: Optional[str] = None
    snmp3_priv_passphrase: Optional[str] = None
    snmp3_context_name: Optional[str] = None
    snmp3_context_engine_id: Optional[str] = None


class ConfigTemplate(SnmpOverrides):
    """
    Named bundle of SNMP configuration.

    Same fields as SnmpOverrides; a template may back many hosts and is
    never modified by the poller.
    """
    snmp_version: Union[int, str] = 1


class HostDescriptor(BaseModel):
    """A device to poll."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    id: Union[int, str] = Field(..., description="Stable device id")
    ip: str = Field(..., description="Management address")
    template_id: str = Field(..., description="Key into the template table")
    snmp_overrides: SnmpOverrides = Field(default_factory=SnmpOverrides)
    type: str = Field(default="", description="Host category, e.g. 'network_sites'")

    @field_validator("template_id", mode="before")
    @classmethod
    def _template_id_to_str(cls, value: Any) -> str:
        return str(value)

    @field_validator("snmp_overrides", mode="before")
    @classmethod
    def _empty_overrides(cls, value: Any) -> Any:
        # Upstream sends [] when a host has no overrides
        return value or {}

    @field_validator("type", mode="before")
    @classmethod
    def _no_category(cls, value: Any) -> Any:
        return "" if value is None else value


@dataclass(frozen=True)
class HostContext:
    """A host plus the type identifier its sysObjectID resolved to."""
    host: HostDescriptor
    type_identifier: str

    @property
    def category(self) -> str:
        return self.host.type


# =============================================================================
# Output Models
# =============================================================================

@dataclass
class Interface:
    """
    Network interface on a polled device.

    Populated from IF-MIB, with addressing from IP-MIB and neighbors
    learned from the ARP cache (layer 3) and bridge forwarding table (layer 2).
    """
    if_index: int
    name: str = ""                               # ifDescr
    if_type: Optional[int] = None                # IANAifType
    mac_address: Optional[str] = None            # ifPhysAddress
    speed_mbps: Optional[int] = None
    status: InterfaceStatus = InterfaceStatus.UNKNOWN
    ip_addresses: List[str] = field(default_factory=list)        # CIDR notation
    connected_l2: List[str] = field(default_factory=list)        # MACs
    connected_l3: List[Dict[str, str]] = field(default_factory=list)  # {mac, ip}

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['status'] = self.status.value
        return d


@dataclass
class Device:
    """
    Canonical device record produced by a mapper.

    Only ``id`` is interpreted by the poller; everything else is
    mapper output handed back to the caller.
    """
    id: Union[int, str]
    ip_address: str
    type_identifier: str = ""
    mapper: str = ""
    vendor: str = ""
    family: str = ""
    network_site: bool = False

    # System group
    sys_name: Optional[str] = None
    sys_descr: Optional[str] = None
    sys_location: Optional[str] = None
    sys_contact: Optional[str] = None
    uptime_ticks: Optional[int] = None

    interfaces: List[Interface] = field(default_factory=list)
    wireless_clients: List[str] = field(default_factory=list)

    def interface(self, if_index: int) -> Optional[Interface]:
        for iface in self.interfaces:
            if iface.if_index == if_index:
                return iface
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'ip_address': self.ip_address,
            'type_identifier': self.type_identifier,
            'mapper': self.mapper,
            'vendor': self.vendor,
            'family': self.family,
            'network_site': self.network_site,
            'sys_name': self.sys_name,
            'sys_descr': self.sys_descr,
            'sys_location': self.sys_location,
            'sys_contact': self.sys_contact,
            'uptime_ticks': self.uptime_ticks,
            'interfaces': [i.to_dict() for i in self.interfaces],
            'wireless_clients': list(self.wireless_clients),
        }
