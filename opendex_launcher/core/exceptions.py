"""
Centralized exception hierarchy for the opendex launcher.

Every failure raised by the resolve/locate/fetch/materialize pipeline is a
subclass of LauncherError, so the CLI can report launcher-side problems
separately from the child process' own exit status.
"""

from contextlib import contextmanager
from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class LauncherError(Exception):
    """Base exception for all launcher errors."""

    stage: Optional[str] = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"{self.stage}: {message}"
        return message


@contextmanager
def error_stage(stage: str):
    """
    Label launcher errors raised inside the block with a pipeline stage.

    The exception itself is re-raised unchanged apart from the label, so
    callers can still catch it by type.

    Args:
        stage: Short description, e.g. "get branch head"

    Example:
        >>> with error_stage("get branch head"):
        ...     resolver.resolve("master")
    """
    try:
        yield
    except LauncherError as e:
        if e.stage is None:
            e.stage = stage
        raise


# ============================================================================
# Remote Exceptions
# ============================================================================


class NotFoundError(LauncherError):
    """Branch, build run or platform artifact does not exist upstream."""

    pass


class NetworkError(LauncherError):
    """Transport-level failure reaching an API or download host."""

    pass


class RemoteError(LauncherError):
    """Remote responded with a failure status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class HttpError(RemoteError):
    """Artifact download responded with a failure status."""

    pass


# ============================================================================
# Local Exceptions
# ============================================================================


class ConfigError(LauncherError):
    """Required precondition unmet (home directory, network, config file)."""

    pass


class FilesystemError(LauncherError):
    """Local filesystem read/write/permission failure."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class CacheLockError(FilesystemError):
    """Raised when a version lock cannot be acquired within timeout."""

    pass


__all__ = [
    "LauncherError",
    "error_stage",
    "NotFoundError",
    "NetworkError",
    "RemoteError",
    "HttpError",
    "ConfigError",
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "CacheLockError",
]
