"""
Artifact download and extraction.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import requests

from opendex_launcher.core.download import (
    DEFAULT_TIMEOUT,
    DownloadProgress,
    download_file,
)
from opendex_launcher.core.exceptions import FilesystemError
from opendex_launcher.core.filesystem import extract_archive

logger = logging.getLogger(__name__)


class ArtifactFetcher:
    """
    Download an artifact archive into a directory and unpack it there.

    The archive is streamed to a temporary file inside the destination,
    extracted in place, then removed.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        verbose: bool = False,
    ):
        self.access_token = access_token
        self.timeout = timeout
        self.session = session
        self.verbose = verbose

    def _on_progress(self, progress: DownloadProgress) -> None:
        logger.info(f"Downloading launcher: {progress}")

    def fetch(self, url: str, destination_dir: Path) -> Path:
        """
        Download url and extract it into destination_dir.

        Returns:
            destination_dir

        Raises:
            HttpError: Non-success status (message is the response body)
            NetworkError: Transport failure
            FilesystemError: Local write or extraction failure
        """
        destination_dir = Path(destination_dir)
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=destination_dir, prefix=".download-", suffix=".zip"
            )
            os.close(fd)
        except OSError as e:
            raise FilesystemError(f"create temporary file in {destination_dir}: {e}") from e

        archive_path = Path(temp_name)
        try:
            download_file(
                url,
                archive_path,
                access_token=self.access_token,
                timeout=self.timeout,
                session=self.session,
                progress_callback=self._on_progress if self.verbose else None,
            )
            count = extract_archive(archive_path, destination_dir)
            logger.debug(f"Extracted {count} files into {destination_dir}")
        finally:
            archive_path.unlink(missing_ok=True)

        return destination_dir


__all__ = ["ArtifactFetcher"]
