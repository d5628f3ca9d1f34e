"""
Fleet Poller - Process-parallel SNMP device mapping.

Identifies each host in a fleet by its sysObjectID, picks the matching
device mapper, and returns one record per device that could be mapped.
"""

__version__ = "1.0.0"

from .config import PollerSettings
from .exceptions import (
    PollError, Unreachable, QueryTimeout, MalformedResponse,
    UnsupportedDevice, TemplateNotFound, WorkerFailure,
)
from .models import HostDescriptor, ConfigTemplate, SnmpOverrides, Device, Interface
from .poller import DeviceMappingPoller, partition, poll

__all__ = [
    "DeviceMappingPoller",
    "PollerSettings",
    "poll",
    "partition",
    "HostDescriptor",
    "ConfigTemplate",
    "SnmpOverrides",
    "Device",
    "Interface",
    "PollError",
    "Unreachable",
    "QueryTimeout",
    "MalformedResponse",
    "UnsupportedDevice",
    "TemplateNotFound",
    "WorkerFailure",
]
