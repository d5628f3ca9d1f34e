"""
Fleet Poller - SNMP Session.

One SnmpSession per polled host. build_session() resolves the host's
effective configuration (per-host overrides win over the template, field
by field) without touching the network; the UDP transport and pysnmp
engine are only created on the first query.

Queries raise instead of returning None:
- Unreachable        no response within timeout x (retries + 1), or transport errors
- QueryTimeout       the request stalled past the hard deadline of
                     timeout x (retries + 1) + 1 s
- MalformedResponse  the agent answered with an error status or missing object

Usage:
    from fleetpoll.snmp.session import build_session

    async with build_session(host, template, settings) as session:
        value = await session.get("1.3.6.1.2.1.1.2.0")
        rows = await session.walk("1.3.6.1.2.1.2.2.1.2")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    bulk_cmd, get_cmd, next_cmd,
    SnmpEngine, CommunityData, UsmUserData,
    UdpTransportTarget, ContextData,
    ObjectType, ObjectIdentity,
    usmHMACMD5AuthProtocol, usmHMACSHAAuthProtocol,
    usmHMAC128SHA224AuthProtocol, usmHMAC192SHA256AuthProtocol,
    usmHMAC256SHA384AuthProtocol, usmHMAC384SHA512AuthProtocol,
    usmDESPrivProtocol, usm3DESEDEPrivProtocol, usmAesCfb128Protocol,
    usmAesCfb192Protocol, usmAesCfb256Protocol,
)
from pysnmp.proto.rfc1902 import OctetString
from pysnmp.proto.rfc1905 import EndOfMibView

from ..config import PollerSettings
from ..exceptions import MalformedResponse, QueryTimeout, TemplateNotFound, Unreachable
from ..models import ConfigTemplate, HostDescriptor, SnmpVersion
from .parsers import is_missing


log = logging.getLogger("fleetpoll.snmp")

AuthData = Union[CommunityData, UsmUserData]
WalkResult = List[Tuple[str, Any]]

SNMP_PORT = 161
QUERY_GRACE = 1.0         # seconds past the pysnmp budget before a query is abandoned
BULK_SIZE = 25
MAX_WALK_ITERATIONS = 1500
ERROR_NO_SUCH_NAME = 2    # SNMPv1 error-status for absent objects / end of MIB


# =============================================================================
# SNMPv3 Protocol Mappings
# =============================================================================

AUTH_PROTOCOLS = {
    "MD5": usmHMACMD5AuthProtocol,
    "SHA": usmHMACSHAAuthProtocol,
    "SHA224": usmHMAC128SHA224AuthProtocol,
    "SHA256": usmHMAC192SHA256AuthProtocol,
    "SHA384": usmHMAC256SHA384AuthProtocol,
    "SHA512": usmHMAC384SHA512AuthProtocol,
}

PRIV_PROTOCOLS = {
    "DES": usmDESPrivProtocol,
    "3DES": usm3DESEDEPrivProtocol,
    "AES": usmAesCfb128Protocol,
    "AES128": usmAesCfb128Protocol,
    "AES192": usmAesCfb192Protocol,
    "AES256": usmAesCfb256Protocol,
}

SEC_LEVEL_NO_AUTH = "noauthnopriv"
SEC_LEVEL_AUTH_NO_PRIV = "authnopriv"
SEC_LEVEL_AUTH_PRIV = "authpriv"


# =============================================================================
# Resolved Configuration
# =============================================================================

@dataclass(frozen=True)
class SecurityProfile:
    """SNMPv3 USM security parameters after override resolution."""
    sec_level: Optional[str] = None
    auth_protocol: Optional[str] = None
    auth_passphrase: Optional[str] = None
    priv_protocol: Optional[str] = None
    priv_passphrase: Optional[str] = None
    context_name: Optional[str] = None
    context_engine_id: Optional[str] = None


@dataclass(frozen=True)
class SessionConfig:
    """
    Effective SNMP configuration for one host.

    For SNMPv3 the community doubles as the USM security name.
    """
    version: SnmpVersion
    community: str
    timeout: float
    retries: int
    security: Optional[SecurityProfile] = None
    port: int = SNMP_PORT

    @property
    def query_budget(self) -> float:
        return self.timeout * (self.retries + 1)


_SECURITY_FIELDS = {
    "sec_level": "snmp3_sec_level",
    "auth_protocol": "snmp3_auth_protocol",
    "auth_passphrase": "snmp3_auth_passphrase",
    "priv_protocol": "snmp3_priv_protocol",
    "priv_passphrase": "snmp3_priv_passphrase",
    "context_name": "snmp3_context_name",
    "context_engine_id": "snmp3_context_engine_id",
}


def _pick(host: HostDescriptor, template: ConfigTemplate, name: str) -> Any:
    """Override value when set, template value otherwise."""
    override = getattr(host.snmp_overrides, name)
    if override is not None:
        return override
    return getattr(template, name)


def resolve_config(host: HostDescriptor, template: ConfigTemplate, settings: PollerSettings) -> SessionConfig:
    """Merge a host's overrides over its template. Neither input is modified."""
    version = SnmpVersion.parse(_pick(host, template, "snmp_version"))
    community = _pick(host, template, "snmp_community") or ""

    security = None
    if version == SnmpVersion.V3:
        security = SecurityProfile(**{
            attr: _pick(host, template, field_name)
            for attr, field_name in _SECURITY_FIELDS.items()
        })

    return SessionConfig(
        version=version,
        community=community,
        timeout=settings.timeout,
        retries=settings.retries,
        security=security,
    )


def resolve_template(host: HostDescriptor, templates: Mapping[str, ConfigTemplate]) -> ConfigTemplate:
    """Look up the host's template, raising TemplateNotFound if absent."""
    template = templates.get(host.template_id)
    if template is None:
        raise TemplateNotFound(f"Template {host.template_id} not found for host {host.id} ({host.ip})")
    return template


def build_session(host: HostDescriptor, template: ConfigTemplate, settings: PollerSettings) -> "SnmpSession":
    """
    Build a ready-to-query session for a host.

    Performs no network I/O; configuration problems surface as query
    failures rather than construction failures.
    """
    return SnmpSession(host.ip, resolve_config(host, template, settings))


# =============================================================================
# Auth Builders
# =============================================================================

def build_usm_user(security_name: str, security: SecurityProfile) -> UsmUserData:
    """
    Build UsmUserData honoring the configured security level.

    noAuthNoPriv ignores both passphrases, authNoPriv ignores the privacy
    passphrase. Unknown protocol names fall back to SHA / AES-128.
    """
    level = (security.sec_level or SEC_LEVEL_NO_AUTH).lower()
    kwargs: Dict[str, Any] = {}

    if level in (SEC_LEVEL_AUTH_NO_PRIV, SEC_LEVEL_AUTH_PRIV):
        kwargs["authKey"] = security.auth_passphrase
        kwargs["authProtocol"] = AUTH_PROTOCOLS.get(
            (security.auth_protocol or "").upper(), usmHMACSHAAuthProtocol
        )

    if level == SEC_LEVEL_AUTH_PRIV:
        kwargs["privKey"] = security.priv_passphrase
        kwargs["privProtocol"] = PRIV_PROTOCOLS.get(
            (security.priv_protocol or "").upper(), usmAesCfb128Protocol
        )

    return UsmUserData(security_name, **kwargs)


def build_auth(config: SessionConfig) -> AuthData:
    """Build pysnmp credentials for the session's SNMP version."""
    if config.version == SnmpVersion.V3:
        return build_usm_user(config.community, config.security or SecurityProfile())

    mp_model = 1 if config.version == SnmpVersion.V2C else 0
    return CommunityData(config.community, mpModel=mp_model)


def build_context(config: SessionConfig) -> ContextData:
    """SNMPv3 context (name and engine id); empty for v1/v2c."""
    security = config.security
    if config.version != SnmpVersion.V3 or security is None:
        return ContextData()

    engine_id = None
    if security.context_engine_id:
        hex_value = security.context_engine_id.strip()
        if hex_value.lower().startswith("0x"):
            hex_value = hex_value[2:]
        engine_id = OctetString(hexValue=hex_value)

    return ContextData(contextEngineId=engine_id, contextName=security.context_name or "")


# =============================================================================
# Session
# =============================================================================

class SnmpSession:
    """
    Per-host SNMP session.

    Owns a private pysnmp engine and transport, both created on first use
    and released by close(). Not shared between hosts.

    Attributes:
        address: Target IP address or hostname
        config: Effective SessionConfig
        bulk_size: Max-repetitions for GETBULK walks
        max_iterations: Safety limit for walk iterations
    """

    def __init__(
        self,
        address: str,
        config: SessionConfig,
        bulk_size: int = BULK_SIZE,
        max_iterations: int = MAX_WALK_ITERATIONS,
    ):
        self.address = address
        self.config = config
        self.bulk_size = bulk_size
        self.max_iterations = max_iterations

        self._engine: Optional[SnmpEngine] = None
        self._transport: Optional[UdpTransportTarget] = None
        self._auth: Optional[AuthData] = None
        self._context: Optional[ContextData] = None

    def __repr__(self) -> str:
        return f"SnmpSession({self.address!r}, v{self.config.version.value})"

    @property
    def version(self) -> SnmpVersion:
        return self.config.version

    async def __aenter__(self) -> "SnmpSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the engine's transport dispatcher. Safe to call twice."""
        if self._engine is not None:
            self._engine.close_dispatcher()
        self._engine = None
        self._transport = None

    # =========================================================================
    # Transport
    # =========================================================================

    async def _prepare(self) -> None:
        if self._engine is not None:
            return
        try:
            self._transport = await UdpTransportTarget.create(
                (self.address, self.config.port),
                timeout=self.config.timeout,
                retries=self.config.retries,
            )
        except (OSError, PySnmpError) as e:
            raise Unreachable(f"{self.address}: cannot open transport: {e}") from e

        self._engine = SnmpEngine()
        self._auth = build_auth(self.config)
        self._context = build_context(self.config)

    async def _send(self, command: Callable[..., Any], *var_binds: Any, **kwargs: Any) -> Tuple[Any, list]:
        """
        Send one PDU and return (error_status, var_binds).

        Transport-level failures are raised; the error status is left for
        the caller because its meaning depends on the operation.
        """
        await self._prepare()

        deadline = self.config.query_budget + QUERY_GRACE
        try:
            error_indication, error_status, error_index, result = await asyncio.wait_for(
                command(self._engine, self._auth, self._transport, self._context, *var_binds, **kwargs),
                timeout=deadline,
            )
        except asyncio.TimeoutError as e:
            raise QueryTimeout(f"{self.address}: no answer after {deadline:.1f}s") from e
        except (OSError, PySnmpError) as e:
            raise Unreachable(f"{self.address}: {e}") from e

        if error_indication:
            raise Unreachable(f"{self.address}: {error_indication}")

        return error_status, list(result or [])

    # =========================================================================
    # Operations
    # =========================================================================

    async def get(self, oid: str) -> Any:
        """
        Get a single scalar value.

        Raises MalformedResponse if the object does not exist.
        """
        value = (await self.get_multiple([oid]))[0]
        if is_missing(value):
            raise MalformedResponse(f"{self.address}: {oid} not present")
        return value

    async def get_multiple(self, oids: List[str]) -> List[Optional[Any]]:
        """
        Get several values in one request.

        Returns:
            Values in request order, None for objects the agent lacks.
            SNMPv1 agents reject the whole PDU when any object is absent,
            which yields None for every entry.
        """
        object_types = [ObjectType(ObjectIdentity(oid)) for oid in oids]
        error_status, var_binds = await self._send(get_cmd, *object_types)

        if error_status:
            if self.version == SnmpVersion.V1 and int(error_status) == ERROR_NO_SUCH_NAME:
                return [None] * len(oids)
            raise MalformedResponse(f"{self.address}: {error_status.prettyPrint()}")

        values: List[Optional[Any]] = [None] * len(oids)
        for position, var_bind in enumerate(var_binds[:len(oids)]):
            value = var_bind[1]
            values[position] = None if is_missing(value) else value
        return values

    async def walk(self, oid: str) -> WalkResult:
        """
        Walk an SNMP table.

        Uses GETBULK on v2c/v3 and GETNEXT on v1, stopping as soon as a
        returned OID leaves the subtree under ``oid``.

        Returns:
            List of (oid_string, value) tuples, possibly empty
        """
        prefix = oid.rstrip('.') + '.'
        results: WalkResult = []
        last_oid = oid

        for _ in range(self.max_iterations):
            start = ObjectType(ObjectIdentity(last_oid))
            if self.version == SnmpVersion.V1:
                error_status, var_binds = await self._send(next_cmd, start, lexicographicMode=False)
            else:
                error_status, var_binds = await self._send(
                    bulk_cmd, 0, self.bulk_size, start, lexicographicMode=False
                )

            if error_status:
                if int(error_status) == ERROR_NO_SUCH_NAME:
                    break
                raise MalformedResponse(f"{self.address}: walk {oid}: {error_status.prettyPrint()}")

            if not var_binds:
                break

            in_table = False
            for var_bind in var_binds:
                oid_str = str(var_bind[0])
                value = var_bind[1]
                if not oid_str.startswith(prefix) or isinstance(value, EndOfMibView):
                    in_table = False
                    break
                results.append((oid_str, value))
                last_oid = oid_str
                in_table = True

            if not in_table:
                break
        else:
            log.warning(f"{self.address}: walk of {oid} stopped after {self.max_iterations} iterations")

        return results
