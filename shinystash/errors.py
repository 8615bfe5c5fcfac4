"""Failure classification for a stash scan."""

from __future__ import annotations

from enum import Enum


class ScanStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    TARGET_UNAVAILABLE = "target_unavailable"
    UNSUPPORTED_VERSION = "unsupported_version"
    MEMORY_READ_FAILURE = "memory_read_failure"
    ALLOCATION_FAILURE = "allocation_failure"


class MemoryAccessError(OSError):
    """Raised by a memory backend when a read cannot be served."""


class ScanError(Exception):
    """Base class for failures that abort a scan.

    ``str(exc)`` is the status line shown to the user.
    """

    status = ScanStatus.MEMORY_READ_FAILURE


class TargetUnavailable(ScanError):
    status = ScanStatus.TARGET_UNAVAILABLE


class UnsupportedVersion(ScanError):
    status = ScanStatus.UNSUPPORTED_VERSION

    def __init__(self, message: str, build_id: str | None = None) -> None:
        super().__init__(message)
        self.build_id = build_id


class MemoryReadFailure(ScanError):
    status = ScanStatus.MEMORY_READ_FAILURE


class AllocationFailure(ScanError):
    status = ScanStatus.ALLOCATION_FAILURE
