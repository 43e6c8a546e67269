"""YAML configuration for the opendex launcher.

The optional ``launcher.yaml`` lives in the launcher home directory:

    branch: master
    network: mainnet
    debug: false
    timeout: 30
    github:
      access_token: ghp_...

Environment variables take precedence over the file: ``BRANCH``,
``NETWORK``, ``DEBUG`` (true/on/1) and ``GITHUB_ACCESS_TOKEN``.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from opendex_launcher.core.exceptions import ConfigError
from opendex_launcher.core.locking import DEFAULT_LOCK_TIMEOUT
from opendex_launcher.github.client import DEFAULT_ORG, DEFAULT_REPO, DEFAULT_WORKFLOW

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "launcher.yaml"
DEFAULT_BRANCH = "master"
DEFAULT_NETWORK = "mainnet"


@dataclass
class GithubConfig:
    """Where launcher builds come from and how to authenticate."""

    access_token: Optional[str] = None
    org: str = DEFAULT_ORG
    repo: str = DEFAULT_REPO
    workflow: str = DEFAULT_WORKFLOW
    artifact_prefix: str = "launcher"


@dataclass
class LauncherConfig:
    """Complete launcher configuration."""

    branch: str = DEFAULT_BRANCH
    network: Optional[str] = DEFAULT_NETWORK
    debug: bool = False
    timeout: float = 30
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    github: GithubConfig = field(default_factory=GithubConfig)


def parse_bool(value: str) -> bool:
    """Interpret an environment flag: true, on and 1 (any case) are true."""
    return value.strip().lower() in ("true", "on", "1")


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Returns:
        Configuration dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigError(f"{config_file}: top level must be a mapping")
    return config


def _get_str(data: Mapping[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    value = data.get(key, default)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError(f"'{key}' must be a string")
    return str(value)


def _get_number(data: Mapping[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{key}' must be a positive number of seconds")
    return value


def parse_config(data: Mapping[str, Any]) -> LauncherConfig:
    """
    Build a LauncherConfig from a parsed YAML mapping.

    Raises:
        ConfigError: If a value has the wrong type
    """
    github_data = data.get("github") or {}
    if not isinstance(github_data, dict):
        raise ConfigError("'github' must be a mapping")

    debug = data.get("debug", False)
    if not isinstance(debug, bool):
        raise ConfigError("'debug' must be true or false")

    defaults = GithubConfig()
    github = GithubConfig(
        access_token=_get_str(github_data, "access_token", None),
        org=_get_str(github_data, "org", defaults.org),
        repo=_get_str(github_data, "repo", defaults.repo),
        workflow=_get_str(github_data, "workflow", defaults.workflow),
        artifact_prefix=_get_str(
            github_data, "artifact_prefix", defaults.artifact_prefix
        ),
    )

    return LauncherConfig(
        branch=_get_str(data, "branch", DEFAULT_BRANCH) or DEFAULT_BRANCH,
        network=_get_str(data, "network", DEFAULT_NETWORK) or None,
        debug=debug,
        timeout=_get_number(data, "timeout", 30),
        lock_timeout=_get_number(data, "lock_timeout", DEFAULT_LOCK_TIMEOUT),
        github=github,
    )


def apply_environment(
    config: LauncherConfig, environ: Optional[Mapping[str, str]] = None
) -> LauncherConfig:
    """Override config values with BRANCH, NETWORK, DEBUG and GITHUB_ACCESS_TOKEN."""
    env = os.environ if environ is None else environ

    if "BRANCH" in env and env["BRANCH"]:
        config.branch = env["BRANCH"]
    if "NETWORK" in env:
        # An empty NETWORK disables the network data directory
        config.network = env["NETWORK"] or None
    if "DEBUG" in env:
        config.debug = parse_bool(env["DEBUG"])
    if env.get("GITHUB_ACCESS_TOKEN"):
        config.github.access_token = env["GITHUB_ACCESS_TOKEN"]
    return config


def load_config(
    home_dir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> LauncherConfig:
    """
    Load the launcher configuration.

    Args:
        home_dir: Launcher home; ``launcher.yaml`` is read from it when present
        environ: Environment mapping (default: os.environ)

    Raises:
        ConfigError: If the file is invalid
    """
    data: Dict[str, Any] = {}
    if home_dir is not None:
        data = load_yaml_config(Path(home_dir) / CONFIG_FILENAME)
    return apply_environment(parse_config(data), environ)


__all__ = [
    "CONFIG_FILENAME",
    "GithubConfig",
    "LauncherConfig",
    "parse_bool",
    "load_yaml_config",
    "parse_config",
    "apply_environment",
    "load_config",
]
