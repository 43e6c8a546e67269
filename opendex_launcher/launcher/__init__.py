"""
Version resolution, artifact lookup and materialization of the launcher binary.
"""

from .fetcher import ArtifactFetcher
from .locator import ArtifactLocator, ArtifactReference
from .materializer import Materializer
from .resolver import RELEASE_REF, VersionResolver, is_release_ref
from .runner import Launcher

__all__ = [
    "ArtifactFetcher",
    "ArtifactLocator",
    "ArtifactReference",
    "Materializer",
    "RELEASE_REF",
    "VersionResolver",
    "is_release_ref",
    "Launcher",
]
