"""
GitHub API access for the opendex launcher.
"""

from .client import Artifact, GithubClient, WorkflowRun

__all__ = ["Artifact", "GithubClient", "WorkflowRun"]
