"""
Artifact location for a resolved version.

Release tags map to a fixed release-asset URL. Branch commits map to the
artifact uploaded by the newest run of the build workflow, which must have
been built from exactly that commit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from opendex_launcher.core.exceptions import NotFoundError
from opendex_launcher.github.client import Artifact, GithubClient, WorkflowRun
from opendex_launcher.launcher.resolver import is_release_ref

logger = logging.getLogger(__name__)

RELEASE_HOST = "github.com"
DEFAULT_ARTIFACT_PREFIX = "launcher"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ArtifactReference:
    """Download location resolved for one version."""

    url: str
    version_id: str


def _created_at(run: WorkflowRun) -> datetime:
    if not run.created_at:
        return _EPOCH
    try:
        created = datetime.fromisoformat(run.created_at.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable created_at on run {run.id}: {run.created_at}")
        return _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


def latest_run(runs: List[WorkflowRun]) -> WorkflowRun:
    """
    Pick the most recently created run.

    Raises:
        NotFoundError: If runs is empty
    """
    if not runs:
        raise NotFoundError("no workflow runs")
    return sorted(runs, key=_created_at, reverse=True)[0]


def select_artifact(artifacts: List[Artifact], platform_key: str) -> Artifact:
    """
    Select the artifact named exactly platform_key.

    Raises:
        NotFoundError: If no artifact matches
    """
    for artifact in artifacts:
        if artifact.name == platform_key:
            return artifact
    names = ", ".join(a.name for a in artifacts) or "none"
    raise NotFoundError(f"no artifact for {platform_key} (available: {names})")


class ArtifactLocator:
    """
    Determine the download URL of the launcher binary for a version.

    Example:
        >>> locator = ArtifactLocator(GithubClient())
        >>> locator.locate("21.06.03", "21.06.03", "linux-amd64").url
        'https://github.com/opendexnetwork/opendex-docker/releases/download/21.06.03/launcher-linux-amd64.zip'
    """

    def __init__(
        self,
        client: GithubClient,
        artifact_prefix: str = DEFAULT_ARTIFACT_PREFIX,
        release_host: str = RELEASE_HOST,
        verbose: bool = False,
    ):
        self.client = client
        self.artifact_prefix = artifact_prefix
        self.release_host = release_host
        self.verbose = verbose

    def release_url(self, tag: str, platform_key: str) -> str:
        return (
            f"https://{self.release_host}/{self.client.org}/{self.client.repo}"
            f"/releases/download/{tag}/{self.artifact_prefix}-{platform_key}.zip"
        )

    def locate(
        self, branch: str, version_id: str, platform_key: str
    ) -> ArtifactReference:
        """
        Locate the artifact for version_id on the current platform.

        Raises:
            NotFoundError: No build for this exact commit, or no artifact
                for platform_key
            NetworkError: Transport failure
            RemoteError: GitHub answered with an error status
        """
        if is_release_ref(branch):
            url = self.release_url(branch, platform_key)
        else:
            url = self._locate_build(branch, version_id, platform_key)

        if self.verbose:
            logger.info(f"Download: {url}")
        else:
            logger.debug(f"Located artifact for {version_id}: {url}")
        return ArtifactReference(url=url, version_id=version_id)

    def _locate_build(self, branch: str, version_id: str, platform_key: str) -> str:
        no_build = (
            f"no launcher build for commit {version_id} "
            f'(The branch "{branch}" does not have a binary launcher)'
        )

        try:
            runs = self.client.list_workflow_runs(branch)
            run = latest_run([r for r in runs if r.is_completed])
        except NotFoundError as e:
            raise NotFoundError(no_build) from e

        # The branch may have advanced between resolve and locate
        if run.head_sha != version_id:
            logger.debug(
                f"Latest run {run.id} was built from {run.head_sha}, not {version_id}"
            )
            raise NotFoundError(no_build)

        artifact = select_artifact(self.client.list_run_artifacts(run.id), platform_key)
        if not artifact.archive_download_url:
            raise NotFoundError(f"artifact {artifact.name} has no download url")
        return artifact.archive_download_url


__all__ = [
    "ArtifactReference",
    "ArtifactLocator",
    "latest_run",
    "select_artifact",
]
