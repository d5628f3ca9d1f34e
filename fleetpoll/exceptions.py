"""
Fleet Poller - Exceptions.

Every failure raised while polling a single host derives from PollError
so the worker can contain it at the host boundary. WorkerFailure is only
ever raised (and contained) by the orchestrator.
"""

from typing import Optional


class PollError(Exception):
    """Base exception for polling operations."""
    pass


class Unreachable(PollError):
    """No response from the device within the query budget."""
    pass


class QueryTimeout(PollError):
    """Response stalled past the session's hard deadline."""
    pass


class MalformedResponse(PollError):
    """A response arrived but could not be parsed into the expected shape."""
    pass


class UnsupportedDevice(PollError):
    """Device was identified but no mapper can handle it."""
    pass


class TemplateNotFound(PollError):
    """Host references a configuration template that was not supplied."""
    pass


class WorkerFailure(PollError):
    """A worker process terminated abnormally."""

    def __init__(self, index: int, exitcode: Optional[int] = None, reason: str = ""):
        self.index = index
        self.exitcode = exitcode
        self.reason = reason
        detail = reason or f"exit code {exitcode}"
        super().__init__(f"Worker {index} failed: {detail}")
