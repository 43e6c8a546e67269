"""
Platform detection for the opendex launcher.

Artifacts are published per platform using Go's naming convention
(``linux-amd64``, ``darwin-arm64``, ``windows-amd64``), so the detected
operating system and CPU architecture are normalized to those names.

Usage:
    from opendex_launcher.core.platform import detect_platform

    info = detect_platform()
    print(info.platform_key())   # 'linux-amd64'
    print(info.binary_name())    # 'launcher'
"""

import functools
import platform
from dataclasses import dataclass

from opendex_launcher.core.exceptions import ConfigError

BINARY_BASENAME = "launcher"


@dataclass(frozen=True)
class PlatformInfo:
    """
    Operating system and architecture of the running host.

    Attributes:
        os: 'linux', 'darwin' or 'windows'
        arch: 'amd64', 'arm64', '386', 'arm' or the raw machine name
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def platform_key(self) -> str:
        """
        Get the key used to match CI artifacts and release assets.

        Example:
            >>> PlatformInfo('linux', 'amd64').platform_key()
            'linux-amd64'
        """
        return f"{self.os}-{self.arch}"

    def binary_name(self, basename: str = BINARY_BASENAME) -> str:
        """
        Get the executable file name for this platform.

        Example:
            >>> PlatformInfo('windows', 'amd64').binary_name()
            'launcher.exe'
        """
        if self.is_windows:
            return f"{basename}.exe"
        return basename

    def __str__(self) -> str:
        return self.platform_key()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Raises:
        ConfigError: If the operating system is not supported
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    system = platform.system().lower()

    if system in ("linux", "darwin", "windows"):
        return system
    raise ConfigError(f"unsupported platform: {system}")


def _detect_architecture() -> str:
    machine = platform.machine().lower()

    # Normalize architecture names
    if machine in ("x86_64", "amd64", "x64"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def clear_platform_cache():
    """Clear the platform detection cache (used by tests)."""
    detect_platform.cache_clear()


__all__ = [
    "BINARY_BASENAME",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
