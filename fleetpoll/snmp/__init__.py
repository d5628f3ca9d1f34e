"""
Fleet Poller - SNMP Layer.

Components:
- session: per-host SnmpSession and the override-aware session builder
- identify: sysObjectID type identification
- parsers: value and table-index decoding
"""

from .session import (
    SnmpSession,
    SessionConfig,
    SecurityProfile,
    build_session,
    resolve_config,
    resolve_template,
)
from .identify import identify, parse_type_identifier


__all__ = [
    'SnmpSession',
    'SessionConfig',
    'SecurityProfile',
    'build_session',
    'resolve_config',
    'resolve_template',
    'identify',
    'parse_type_identifier',
]
