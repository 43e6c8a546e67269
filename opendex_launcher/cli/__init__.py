"""
Command-line interface of the opendex launcher.
"""

from .entry import main, run

__all__ = ["main", "run"]
