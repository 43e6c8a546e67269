"""
Configuration loading for the opendex launcher.
"""

from .settings import (
    CONFIG_FILENAME,
    GithubConfig,
    LauncherConfig,
    load_config,
    parse_bool,
)

__all__ = [
    "CONFIG_FILENAME",
    "GithubConfig",
    "LauncherConfig",
    "load_config",
    "parse_bool",
]
