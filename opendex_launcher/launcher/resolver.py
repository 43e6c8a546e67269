"""
Branch to version identifier resolution.

A version identifier is the immutable key of a cache entry: the head commit
sha of a branch, or the branch string itself when it names a dated release
tag such as ``21.06.03`` or ``21.06.03-rc1``.
"""

import logging
import re

from opendex_launcher.github.client import GithubClient

logger = logging.getLogger(__name__)

RELEASE_REF = re.compile(r"^[0-9]{2}\.[0-9]{2}\.[0-9]{2}.*$")


def is_release_ref(branch: str) -> bool:
    """
    Check whether branch names a dated release tag.

    Example:
        >>> is_release_ref("21.06.03")
        True
        >>> is_release_ref("master")
        False
    """
    return RELEASE_REF.match(branch) is not None


class VersionResolver:
    """
    Map a branch name to a version identifier.

    Branch heads are looked up on every call since branches move; tags are
    returned as-is without touching the network.
    """

    def __init__(self, client: GithubClient, verbose: bool = False):
        self.client = client
        self.verbose = verbose

    def resolve(self, branch: str) -> str:
        """
        Resolve branch to a version identifier.

        Raises:
            NotFoundError: Branch does not exist upstream
            NetworkError: Transport failure
            RemoteError: GitHub answered with an error status
        """
        if is_release_ref(branch):
            version_id = branch
        else:
            version_id = self.client.get_head_commit(branch)

        if self.verbose:
            logger.info(f"Branch: {branch} ({version_id})")
        else:
            logger.debug(f"Resolved {branch} to {version_id}")
        return version_id


__all__ = ["RELEASE_REF", "is_release_ref", "VersionResolver"]
