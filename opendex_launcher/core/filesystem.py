"""
Cross-platform file system utilities for the opendex launcher.

This module provides:
- Stat-based probes (exists, directory, user-writable, user-executable)
- Safe ZIP extraction that keeps recorded file modes
- Safe directory removal
"""

import logging
import os
import shutil
import stat
import zipfile
from pathlib import Path
from typing import Callable, Optional, Union

from opendex_launcher.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
)

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"
IS_UNIX = not IS_WINDOWS

USER_WRITABLE = stat.S_IWUSR
USER_EXECUTABLE = stat.S_IXUSR


# ============================================================================
# Probes
# ============================================================================


def _stat(path: Union[str, Path]) -> os.stat_result:
    try:
        return os.stat(path)
    except OSError as e:
        raise FilesystemError(f"stat {path}: {e}") from e


def file_exists(path: Union[str, Path]) -> bool:
    """
    Check whether a path exists.

    A missing path is not an error. Any other stat failure (permission
    denied on a parent, for example) is reported as FilesystemError.

    Args:
        path: Path to check

    Returns:
        True if the path exists
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except NotADirectoryError:
        return False
    except OSError as e:
        raise FilesystemError(f"stat {path}: {e}") from e
    return True


def is_dir(path: Union[str, Path]) -> bool:
    """Return True if path is a directory. Missing paths raise FilesystemError."""
    return stat.S_ISDIR(_stat(path).st_mode)


def is_writable(path: Union[str, Path]) -> bool:
    """Return True if the owner write bit is set on path."""
    return bool(_stat(path).st_mode & USER_WRITABLE)


def is_executable(path: Union[str, Path]) -> bool:
    """Return True if the owner execute bit is set on path."""
    return bool(_stat(path).st_mode & USER_EXECUTABLE)


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> Path:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../' or
    absolute member names).

    Args:
        path: Member path from archive
        destination: Extraction destination

    Returns:
        Resolved target path of the member

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )
    return member_path


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> int:
    """
    Extract a ZIP archive to a destination directory.

    All member paths are validated before anything is written. File modes
    recorded in the archive are applied to the extracted files, which is how
    the executable bit survives the transfer.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        progress_callback: Optional callback(current, total) for progress

    Returns:
        Number of regular files written

    Raises:
        InsecureArchiveError: If archive contains malicious paths
        ArchiveExtractionError: If extraction fails

    Example:
        >>> extract_archive('launcher.zip', '/tmp/launcher')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    try:
        destination.mkdir(parents=True, exist_ok=True)
        return _extract_zip(archive_path, destination, progress_callback)
    except InsecureArchiveError:
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(
    archive_path: Path,
    destination: Path,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> int:
    """Extract a ZIP archive entry by entry."""
    written = 0
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()
        total = len(members)

        # Validate all paths first
        targets = [_validate_archive_path(m.filename, destination) for m in members]

        for i, (member, target) in enumerate(zip(members, targets)):
            logger.debug(f"Extracting {member.filename}")

            if member.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                mode = stat.S_IMODE(member.external_attr >> 16)
                if mode and IS_UNIX:
                    os.chmod(target, mode)
                written += 1

            if progress_callback:
                progress_callback(i + 1, total)

    return written


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise exc[1]

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def ensure_executable(path: Union[str, Path]) -> bool:
    """
    Set mode 0755 on path if its owner execute bit is unset.

    No-op on Windows, where the execute bit does not exist.

    Args:
        path: File to make executable

    Returns:
        True if the mode was changed

    Raises:
        FilesystemError: If the file cannot be inspected or chmod fails
    """
    if IS_WINDOWS:
        return False

    if is_executable(path):
        return False

    try:
        os.chmod(path, 0o755)
    except OSError as e:
        raise FilesystemError(f"chmod {path}: {e}") from e
    logger.debug(f"Set executable bit on {path}")
    return True


__all__ = [
    "IS_WINDOWS",
    "IS_UNIX",
    "file_exists",
    "is_dir",
    "is_writable",
    "is_executable",
    "is_relative_to",
    "extract_archive",
    "safe_rmtree",
    "ensure_executable",
]
