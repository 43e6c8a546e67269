"""
Version cache and materialization.

The cache root holds one directory per version identifier. An entry is
unpacked in a staging directory next to it and renamed into place once the
executable is present, so an existing entry is always a complete one.
Entries are never modified or removed by the launcher.

Materialization workflow:
1. Compute ``<versions_dir>/<version_id>/<binary>``
2. If it exists, skip to step 5
3. Take the version lock and check again
4. Locate the artifact, fetch it into a staging directory, rename into place
5. Make sure the binary is executable (non-Windows)
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from opendex_launcher.core.exceptions import (
    ConfigError,
    FilesystemError,
    NotFoundError,
    error_stage,
)
from opendex_launcher.core.filesystem import ensure_executable, file_exists, safe_rmtree
from opendex_launcher.core.locking import DEFAULT_LOCK_TIMEOUT, LockManager
from opendex_launcher.core.platform import PlatformInfo, detect_platform
from opendex_launcher.launcher.fetcher import ArtifactFetcher
from opendex_launcher.launcher.locator import ArtifactLocator

logger = logging.getLogger(__name__)


class Materializer:
    """
    Make the launcher binary of a version available locally.

    Example:
        >>> materializer = Materializer(versions_dir, locator, fetcher)
        >>> materializer.ensure_local("master", "abc1234", "linux-amd64")
        PosixPath('/home/user/.opendex-docker/launcher/versions/abc1234/launcher')
    """

    def __init__(
        self,
        versions_dir: Path,
        locator: ArtifactLocator,
        fetcher: ArtifactFetcher,
        platform_info: Optional[PlatformInfo] = None,
        lock_manager: Optional[LockManager] = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        verbose: bool = False,
    ):
        self.versions_dir = Path(versions_dir)
        self.locator = locator
        self.fetcher = fetcher
        self.platform_info = platform_info or detect_platform()
        self.lock_manager = lock_manager or LockManager(self.versions_dir / ".locks")
        self.lock_timeout = lock_timeout
        self.verbose = verbose

    def entry_dir(self, version_id: str) -> Path:
        """Cache entry directory of a version."""
        if (
            not version_id
            or version_id in (".", "..")
            or "/" in version_id
            or "\\" in version_id
        ):
            raise ConfigError(f"invalid version identifier: {version_id!r}")
        return self.versions_dir / version_id

    def executable_path(self, version_id: str) -> Path:
        """Expected path of the launcher binary of a version."""
        return self.entry_dir(version_id) / self.platform_info.binary_name()

    def is_cached(self, version_id: str) -> bool:
        return file_exists(self.executable_path(version_id))

    def ensure_local(
        self, branch: str, version_id: str, platform_key: Optional[str] = None
    ) -> Path:
        """
        Return the path of an executable launcher binary for version_id.

        Downloads and unpacks the artifact on a cache miss. A cache hit
        performs no network access at all.

        Args:
            branch: Branch or tag the version was resolved from
            version_id: Commit sha or release tag
            platform_key: Artifact platform key (default: current platform)

        Raises:
            NotFoundError, NetworkError, RemoteError, HttpError: Remote failures
            FilesystemError: Local failures, including lock timeouts
        """
        platform_key = platform_key or self.platform_info.platform_key()
        executable = self.executable_path(version_id)

        if file_exists(executable):
            logger.debug(f"Cache hit: {executable}")
        else:
            with self.lock_manager.version_lock(version_id, timeout=self.lock_timeout):
                # Another process may have finished while we waited
                if file_exists(executable):
                    logger.debug(f"Materialized by another process: {executable}")
                else:
                    self._materialize(branch, version_id, platform_key)

        ensure_executable(executable)

        if self.verbose:
            logger.info(f"Launcher: {executable}")
        return executable

    def _remove_stale_staging(self, version_id: str) -> None:
        """
        Remove staging directories of version_id left by killed processes.

        Only called with the version lock held, so no live process owns them.
        """
        prefix = f".staging-{version_id}-"
        for stale in self.versions_dir.iterdir():
            name = stale.name
            # ".staging-21.06.03-rc1-x" belongs to 21.06.03-rc1, not 21.06.03
            if not name.startswith(prefix) or "-" in name[len(prefix) :]:
                continue
            if stale.is_dir():
                logger.warning(f"Removing stale staging directory: {stale}")
                safe_rmtree(stale, require_prefix=self.versions_dir)

    def _materialize(self, branch: str, version_id: str, platform_key: str) -> None:
        with error_stage("locate artifact"):
            reference = self.locator.locate(branch, version_id, platform_key)

        entry_dir = self.entry_dir(version_id)
        binary_name = self.platform_info.binary_name()

        self._remove_stale_staging(version_id)

        try:
            staging_dir = Path(
                tempfile.mkdtemp(prefix=f".staging-{version_id}-", dir=self.versions_dir)
            )
            # mkdtemp creates 0700; cache entries are 0755
            os.chmod(staging_dir, 0o755)
        except OSError as e:
            raise FilesystemError(f"create staging directory: {e}") from e

        try:
            with error_stage("download launcher"):
                self.fetcher.fetch(reference.url, staging_dir)

            if not (staging_dir / binary_name).is_file():
                raise NotFoundError(
                    f"artifact {reference.url} does not contain {binary_name}"
                )

            if entry_dir.exists():
                # Left behind by an interrupted run of an older launcher
                logger.warning(f"Replacing incomplete cache entry: {entry_dir}")
                safe_rmtree(entry_dir, require_prefix=self.versions_dir)

            try:
                staging_dir.rename(entry_dir)
            except OSError as e:
                raise FilesystemError(f"rename {staging_dir} to {entry_dir}: {e}") from e

            logger.debug(f"Cached {version_id} at {entry_dir}")
        finally:
            if staging_dir.exists():
                safe_rmtree(staging_dir, require_prefix=self.versions_dir)


__all__ = ["Materializer"]
