"""
Directory structure management for the opendex launcher.

Directory Structure:
    Home (~/.opendex-docker on Linux,
          ~/Library/Application Support/OpendexDocker on macOS,
          ~/AppData/Local/OpendexDocker on Windows):
        - launcher.yaml        : Optional launcher configuration
        - launcher/            : Working directory of the launcher
          - versions/          : Cache root, one directory per version id
            - .locks/          : Per-version lock files
        - <network>/           : Data directory of the selected network
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from opendex_launcher.core.exceptions import ConfigError, FilesystemError
from opendex_launcher.core.filesystem import file_exists, is_dir, is_writable
from opendex_launcher.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)


@dataclass
class LauncherDirs:
    """Resolved launcher directories."""

    home_dir: Path
    launcher_dir: Path
    versions_dir: Path
    network_dir: Optional[Path] = None


def get_home_dir(platform_info: Optional[PlatformInfo] = None) -> Path:
    """
    Get the platform-specific home directory of the launcher.

    Raises:
        ConfigError: If the user home cannot be determined or the platform
            is not supported
    """
    info = platform_info or detect_platform()

    try:
        user_home = Path.home()
    except RuntimeError as e:
        raise ConfigError(f"cannot determine user home directory: {e}") from e

    if info.os == "linux":
        return user_home / ".opendex-docker"
    elif info.os == "darwin":
        return user_home / "Library" / "Application Support" / "OpendexDocker"
    elif info.os == "windows":
        return user_home / "AppData" / "Local" / "OpendexDocker"
    raise ConfigError(f"unsupported platform: {info.os}")


def check_dir(path: Path) -> Path:
    """
    Check that path is a writable folder, creating it when missing.

    Raises:
        FilesystemError: If path is not a folder, not writable or cannot
            be created
    """
    if not file_exists(path):
        try:
            path.mkdir(mode=0o755, parents=True)
        except FileExistsError:
            pass
        except OSError as e:
            raise FilesystemError(f"mkdir {path}: {e}") from e

    if not is_dir(path):
        raise FilesystemError(f"not a folder: {path}")
    if not is_writable(path):
        raise FilesystemError(f"not writable: {path}")
    return path


def ensure_launcher_dirs(
    home_dir: Optional[Path], network: Optional[str] = None
) -> LauncherDirs:
    """
    Create the launcher directory structure if it doesn't exist.

    Args:
        home_dir: Launcher home directory
        network: Network name; when given its data directory is ensured too

    Raises:
        ConfigError: If home_dir is empty
        FilesystemError: If a directory is unusable
    """
    if not home_dir:
        raise ConfigError("homeDir is empty")

    home_dir = check_dir(Path(home_dir))
    launcher_dir = check_dir(home_dir / "launcher")
    versions_dir = check_dir(launcher_dir / "versions")

    network_dir = None
    if network is not None:
        if not network:
            raise ConfigError("network is empty")
        network_dir = check_dir(home_dir / network)

    logger.debug(f"Launcher home: {home_dir}")
    return LauncherDirs(
        home_dir=home_dir,
        launcher_dir=launcher_dir,
        versions_dir=versions_dir,
        network_dir=network_dir,
    )


__all__ = ["LauncherDirs", "get_home_dir", "check_dir", "ensure_launcher_dirs"]
