"""
Fleet Poller - Device Type Identification.

Reads sysObjectID.0 once and normalizes it into the type identifier used
as the mapper dispatch key.

Agents render the value in different ways, e.g.:
    "1.3.6.1.4.1.14988.1"
    ".1.3.6.1.4.1.14988.1"
    "OID: .1.3.6.1.4.1.14988.1"
    "SNMPv2-SMI::enterprises:.1.3.6.1.4.1.14988.1"

The identifier is the final colon-delimited segment with surrounding
whitespace and leading dots removed.
"""

import re
from typing import Any

from ..exceptions import MalformedResponse
from ..oids import SYSTEM
from .parsers import decode_string
from .session import SnmpSession


TYPE_IDENTIFIER_PATTERN = re.compile(r'^\d+(\.\d+)+$')


def parse_type_identifier(raw: Any) -> str:
    """
    Normalize a sysObjectID value into a dotted identifier.

    Raises:
        MalformedResponse: value is empty or not a dotted numeric OID
    """
    text = decode_string(raw) if not isinstance(raw, str) else raw
    identifier = text.split(':')[-1].strip().lstrip('.')

    if not TYPE_IDENTIFIER_PATTERN.match(identifier):
        raise MalformedResponse(f"Unparseable sysObjectID: {text!r}")

    return identifier


async def identify(session: SnmpSession) -> str:
    """
    Identify a device by its sysObjectID.

    Issues exactly one GET. Unreachable / QueryTimeout propagate from the
    session; a missing or unparseable value raises MalformedResponse.
    """
    value = await session.get(SYSTEM.SYS_OBJECT_ID)
    return parse_type_identifier(value)
