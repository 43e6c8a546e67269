"""
opendex launcher: bootstrap the launcher binary of a branch and hand off to it.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("opendex-launcher")
except PackageNotFoundError:
    __version__ = "0.1.0"
