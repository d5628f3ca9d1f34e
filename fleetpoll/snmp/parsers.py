"""
Fleet Poller - SNMP Value Parsers.

Functions for decoding pysnmp values and table indexes into plain
Python values.

Handles:
- Missing-object markers (noSuchObject, noSuchInstance, endOfMibView)
- Text and integer extraction
- MAC address decoding from values and from OID indexes
- IPv4 addresses carried in OID indexes

Decoders return a safe fallback (None / "") on bad input rather than
raising; callers decide whether a missing value is an error.
"""

import binascii
from typing import Optional, Any, List

from pysnmp.proto.rfc1905 import NoSuchObject, NoSuchInstance, EndOfMibView


def is_missing(value: Any) -> bool:
    """True for None and the SNMP exception values returned in place of data."""
    return value is None or isinstance(value, (NoSuchObject, NoSuchInstance, EndOfMibView))


def oid_index(oid: str, base: str) -> List[int]:
    """
    Return the index components of a table OID below ``base``.

    Example:
        >>> oid_index("1.3.6.1.2.1.2.2.1.2.10", "1.3.6.1.2.1.2.2.1.2")
        [10]
    """
    suffix = oid[len(base):].lstrip('.')
    if not suffix:
        return []
    return [int(part) for part in suffix.split('.')]


# =============================================================================
# String / Integer Decoding
# =============================================================================

def decode_string(value: Any) -> str:
    """
    Safely convert SNMP value to string.

    Handles pysnmp OctetString, DisplayString, ObjectIdentifier and other
    types. Strips null bytes and surrounding whitespace.
    """
    if is_missing(value):
        return ""
    try:
        if hasattr(value, 'asOctets'):
            octets = value.asOctets()
            try:
                result = octets.decode('utf-8')
            except UnicodeDecodeError:
                result = octets.decode('latin-1')
        elif hasattr(value, 'prettyPrint'):
            result = value.prettyPrint()
        elif isinstance(value, bytes):
            try:
                result = value.decode('utf-8')
            except UnicodeDecodeError:
                result = value.decode('latin-1')
        else:
            result = str(value)

        return result.replace('\x00', '').strip()

    except (TypeError, ValueError):
        return str(value)


def decode_int(value: Any) -> Optional[int]:
    """
    Safely convert SNMP value to integer.

    Returns:
        Integer value or None on failure
    """
    if is_missing(value):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        pass
    try:
        return int(decode_string(value))
    except (ValueError, TypeError):
        return None


# =============================================================================
# MAC Address Decoding
# =============================================================================

def decode_mac(value: Any) -> Optional[str]:
    """
    Decode a 6-octet SNMP value as a MAC address.

    Returns:
        Lowercase colon-separated MAC (e.g., "aa:bb:cc:dd:ee:ff"),
        or None when the value is not 6 octets long

    Examples:
        >>> decode_mac(b'\\xaa\\xbb\\xcc\\xdd\\xee\\xff')
        'aa:bb:cc:dd:ee:ff'
    """
    if is_missing(value):
        return None
    try:
        if hasattr(value, 'asOctets'):
            data = value.asOctets()
        elif isinstance(value, str):
            data = value.encode('latin-1')
        else:
            data = bytes(value)
    except (TypeError, ValueError):
        return None

    if len(data) != 6:
        return None

    hex_str = binascii.hexlify(data).decode()
    return ':'.join(hex_str[i:i + 2] for i in range(0, 12, 2))


def mac_from_oid_index(index: List[int]) -> Optional[str]:
    """Build a MAC from the last six decimal OID index components."""
    if len(index) < 6:
        return None
    octets = index[-6:]
    if not all(0 <= b <= 255 for b in octets):
        return None
    return ':'.join(f'{b:02x}' for b in octets)


# =============================================================================
# IP Address Decoding
# =============================================================================

def ip_from_oid_index(index: List[int]) -> Optional[str]:
    """Build a dotted IPv4 address from the last four OID index components."""
    if len(index) < 4:
        return None
    octets = index[-4:]
    if not all(0 <= b <= 255 for b in octets):
        return None
    return '.'.join(str(b) for b in octets)

