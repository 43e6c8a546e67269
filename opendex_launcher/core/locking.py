"""
Cross-process locking for the version cache.

Two launcher processes starting at the same time may both find a version
missing from the cache. The version lock serializes them: the first one
downloads, the second one re-checks the cache after acquiring the lock and
finds the finished entry.

Usage:
    from opendex_launcher.core.locking import LockManager

    lock_manager = LockManager(versions_dir / ".locks")
    with lock_manager.version_lock(version_id, timeout=300):
        ...
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from opendex_launcher.core.exceptions import CacheLockError, FilesystemError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 300


class LockManager:
    """
    Manages file locks for cache entries.

    Uses the `filelock` library for cross-platform, cross-process locking
    with automatic release on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"create lock directory {self.lock_dir}: {e}") from e

    def lock_path(self, version_id: str) -> Path:
        # Sanitize version_id to create valid filename
        safe_id = version_id.replace("/", "-").replace("\\", "-").replace(":", "-")
        return self.lock_dir / f"version-{safe_id}.lock"

    @contextmanager
    def version_lock(self, version_id: str, timeout: float = DEFAULT_LOCK_TIMEOUT):
        """
        Acquire the lock guarding materialization of one version.

        Args:
            version_id: Commit hash or release tag
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Raises:
            CacheLockError: If lock can't be acquired within timeout
        """
        lock_path = self.lock_path(version_id)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            lock.acquire()
        except LockTimeout as e:
            raise CacheLockError(
                f"Could not acquire lock for {version_id} after {timeout}s. "
                "Another launcher may be downloading this version."
            ) from e

        logger.debug(f"Acquired version lock: {lock_path}")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Released version lock: {lock_path}")


__all__ = ["LockManager", "DEFAULT_LOCK_TIMEOUT"]
