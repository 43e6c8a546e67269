"""
Network download manager with progress tracking.

This module provides streaming HTTP downloads with:
- Optional GitHub token authentication
- Explicit request timeouts
- Progress reporting (bytes, percentage, speed, ETA)
- Cleanup of partially written files on failure

There is no retry and no resume: a failed download aborts the caller.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

import requests
from requests.exceptions import RequestException

from opendex_launcher.core.exceptions import FilesystemError, HttpError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        return format_progress(self)


def auth_headers(access_token: Optional[str]) -> Dict[str, str]:
    """Build the Authorization header for an optional GitHub token."""
    if not access_token:
        return {}
    return {"Authorization": f"token {access_token}"}


def download_file(
    url: str,
    destination: Path,
    access_token: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
) -> Path:
    """
    Download url to destination as a binary stream.

    Args:
        url: URL to download from
        destination: Local path to save file
        access_token: Optional GitHub token sent as ``Authorization: token ...``
        timeout: Request timeout in seconds
        session: Optional requests session to reuse connections
        progress_callback: Optional callback for progress updates

    Returns:
        Path to downloaded file

    Raises:
        HttpError: Server answered with a non-success status (message is the body)
        NetworkError: Transport failure (DNS, connection, timeout)
        FilesystemError: Destination cannot be written
        ValueError: If URL is empty

    Example:
        >>> download_file("https://example.com/launcher.zip", Path("launcher.zip"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    http = session or requests

    logger.debug(f"Downloading from {url}")

    try:
        response = http.get(
            url,
            headers=auth_headers(access_token),
            stream=True,
            timeout=timeout,
            allow_redirects=True,
        )
    except RequestException as e:
        raise NetworkError(f"do request: {e}") from e

    with response:
        if not response.ok:
            raise HttpError(response.text, status_code=response.status_code)

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        try:
            _stream_to_file(response, destination, total_size, progress_callback)
        except RequestException as e:
            destination.unlink(missing_ok=True)
            raise NetworkError(f"copy: {e}") from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise FilesystemError(f"create {destination}: {e}") from e

    logger.debug(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    response: requests.Response,
    destination: Path,
    total_size: int,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
) -> None:
    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            # Report progress (max once per 0.5 seconds to avoid spam)
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                elapsed = current_time - start_time
                speed = downloaded / elapsed if elapsed > 0 else 0
                remaining = total_size - downloaded if total_size > 0 else 0
                eta = remaining / speed if speed > 0 else 0

                progress_callback(
                    DownloadProgress(
                        bytes_downloaded=downloaded,
                        total_bytes=total_size if total_size > 0 else downloaded,
                        percentage=(downloaded / total_size * 100)
                        if total_size > 0
                        else 0,
                        speed_bps=speed,
                        eta_seconds=eta,
                    )
                )
                last_progress_time = current_time


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
