"""
GitHub REST API client.

Covers the three endpoints the launcher needs: the head commit of a branch,
the workflow runs of the build workflow for a branch, and the artifacts of
one run. All requests carry an explicit timeout; nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.exceptions import RequestException

from opendex_launcher.core.download import DEFAULT_TIMEOUT, auth_headers
from opendex_launcher.core.exceptions import NetworkError, NotFoundError, RemoteError

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
DEFAULT_ORG = "opendexnetwork"
DEFAULT_REPO = "opendex-docker"
DEFAULT_WORKFLOW = "build.yml"


@dataclass
class WorkflowRun:
    """One run of a GitHub Actions workflow."""

    id: int
    created_at: str
    head_branch: str
    head_sha: str
    status: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowRun":
        return cls(
            id=int(data["id"]),
            created_at=data.get("created_at") or "",
            head_branch=data.get("head_branch") or "",
            head_sha=data.get("head_sha") or "",
            status=data.get("status") or "",
        )

    @property
    def is_completed(self) -> bool:
        # An empty status means the listing was already filtered server-side
        return self.status in ("", "completed")


@dataclass
class Artifact:
    """A build artifact attached to a workflow run."""

    name: str
    size_in_bytes: int
    archive_download_url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artifact":
        return cls(
            name=data["name"],
            size_in_bytes=int(data.get("size_in_bytes") or 0),
            archive_download_url=data.get("archive_download_url") or "",
        )


class GithubClient:
    """
    Thin client over the GitHub REST API.

    Example:
        >>> client = GithubClient(access_token="ghp_...")
        >>> client.get_head_commit("master")
        'abc1234...'
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        org: str = DEFAULT_ORG,
        repo: str = DEFAULT_REPO,
        workflow: str = DEFAULT_WORKFLOW,
        timeout: float = DEFAULT_TIMEOUT,
        api_url: str = API_URL,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.org = org
        self.repo = repo
        self.workflow = workflow
        self.timeout = timeout
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/repos/{self.org}/{self.repo}"

    def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a JSON document.

        Raises:
            NetworkError: Transport failure
            NotFoundError: HTTP 404
            RemoteError: Any other non-success status, or an undecodable body
        """
        headers = {"Accept": "application/vnd.github.v3+json"}
        headers.update(auth_headers(self.access_token))

        logger.debug(f"GET {url} {params or ''}")
        try:
            response = self.session.get(
                url, headers=headers, params=params, timeout=self.timeout
            )
        except RequestException as e:
            raise NetworkError(f"GET {url}: {e}") from e

        if response.status_code != 200:
            message = _error_message(response)
            if response.status_code == 404:
                raise NotFoundError(message)
            raise RemoteError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"decode: {e}", status_code=response.status_code) from e

    def get_head_commit(self, branch: str) -> str:
        """
        Get the sha of the latest commit on branch.

        Raises:
            NotFoundError: If the branch does not exist upstream
        """
        ref = quote(branch, safe="/")
        url = f"{self.repo_url}/commits/{ref}"
        try:
            result = self._get_json(url)
        except RemoteError as e:
            # GitHub answers 422 "No commit found for SHA" for unknown refs
            if e.status_code == 422:
                raise NotFoundError(str(e)) from e
            raise

        sha = result.get("sha") if isinstance(result, dict) else None
        if not sha:
            raise RemoteError(f"no sha in commit response for {branch}")
        return sha

    def list_workflow_runs(self, branch: str) -> List[WorkflowRun]:
        """List completed runs of the build workflow triggered on branch."""
        url = f"{self.repo_url}/actions/workflows/{self.workflow}/runs"
        result = self._get_json(url, params={"branch": branch, "status": "completed"})
        return [WorkflowRun.from_dict(r) for r in result.get("workflow_runs") or []]

    def list_run_artifacts(self, run_id: int) -> List[Artifact]:
        """List the artifacts uploaded by one workflow run."""
        url = f"{self.repo_url}/actions/runs/{run_id}/artifacts"
        result = self._get_json(url)
        return [Artifact.from_dict(a) for a in result.get("artifacts") or []]


def _error_message(response: requests.Response) -> str:
    """Extract GitHub's ``message`` field, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"HTTP {response.status_code}"


__all__ = [
    "API_URL",
    "DEFAULT_ORG",
    "DEFAULT_REPO",
    "DEFAULT_WORKFLOW",
    "WorkflowRun",
    "Artifact",
    "GithubClient",
]
