"""
Core functionality for the opendex launcher.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    LauncherDirs,
    get_home_dir,
    check_dir,
    ensure_launcher_dirs,
)

from .locking import LockManager

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    LauncherError,
    error_stage,
    NotFoundError,
    NetworkError,
    RemoteError,
    HttpError,
    ConfigError,
    FilesystemError,
    ArchiveExtractionError,
    InsecureArchiveError,
    CacheLockError,
)

__all__ = [
    "LauncherDirs",
    "get_home_dir",
    "check_dir",
    "ensure_launcher_dirs",
    "LockManager",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
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
