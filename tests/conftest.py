"""
Pytest configuration and shared fixtures for opendex launcher tests.
"""

import io
import zipfile
from pathlib import Path
from typing import Callable, Dict, Tuple, Union

import pytest

from opendex_launcher.core.platform import PlatformInfo

ZipSpec = Dict[str, Union[bytes, str, Tuple[Union[bytes, str], int]]]


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset the platform detection cache between tests."""
    from opendex_launcher.core import platform

    platform.clear_platform_cache()
    yield
    platform.clear_platform_cache()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(os="linux", arch="amd64")


@pytest.fixture
def windows_platform() -> PlatformInfo:
    return PlatformInfo(os="windows", arch="amd64")


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def zip_bytes() -> Callable[[ZipSpec], bytes]:
    """
    Build an in-memory ZIP archive.

    Names ending in '/' become directory entries. Values are either the file
    content (mode 0644) or a (content, mode) tuple.

    Example:
        def test_extract(zip_bytes):
            data = zip_bytes({"bin/": b"", "bin/tool": (b"#!/bin/sh", 0o755)})
    """

    def build(files: ZipSpec) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, spec in files.items():
                info = zipfile.ZipInfo(name)
                if name.endswith("/"):
                    info.external_attr = (0o40755 << 16) | 0x10
                    zf.writestr(info, b"")
                    continue
                if isinstance(spec, tuple):
                    content, mode = spec
                else:
                    content, mode = spec, 0o644
                info.external_attr = (0o100000 | mode) << 16
                zf.writestr(info, content)
        return buffer.getvalue()

    return build


@pytest.fixture
def write_zip(tmp_path: Path, zip_bytes) -> Callable[..., Path]:
    """Write a ZIP archive built by zip_bytes to disk and return its path."""

    def write(files: ZipSpec, name: str = "archive.zip") -> Path:
        path = tmp_path / name
        path.write_bytes(zip_bytes(files))
        return path

    return write
