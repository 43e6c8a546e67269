"""
Launcher orchestration: resolve, materialize, hand off.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

import requests

from opendex_launcher import __version__
from opendex_launcher.config.settings import LauncherConfig
from opendex_launcher.core.directory import LauncherDirs, ensure_launcher_dirs
from opendex_launcher.core.exceptions import FilesystemError, error_stage
from opendex_launcher.core.platform import PlatformInfo, detect_platform
from opendex_launcher.github.client import GithubClient
from opendex_launcher.launcher.fetcher import ArtifactFetcher
from opendex_launcher.launcher.locator import ArtifactLocator
from opendex_launcher.launcher.materializer import Materializer
from opendex_launcher.launcher.resolver import VersionResolver

logger = logging.getLogger(__name__)


class Launcher:
    """
    Bootstrap the launcher binary of the configured branch and run it.

    Example:
        >>> launcher = Launcher(load_config(home), home_dir=home)
        >>> exit_code = launcher.start(sys.argv[1:])
    """

    def __init__(
        self,
        config: LauncherConfig,
        home_dir: Path,
        platform_info: Optional[PlatformInfo] = None,
        client: Optional[GithubClient] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.home_dir = home_dir
        self.platform_info = platform_info or detect_platform()
        self.session = session or requests.Session()
        self.client = client or GithubClient(
            access_token=config.github.access_token,
            org=config.github.org,
            repo=config.github.repo,
            workflow=config.github.workflow,
            timeout=config.timeout,
            session=self.session,
        )
        self.resolver = VersionResolver(self.client, verbose=config.debug)
        self.locator = ArtifactLocator(
            self.client,
            artifact_prefix=config.github.artifact_prefix,
            verbose=config.debug,
        )
        self.fetcher = ArtifactFetcher(
            access_token=config.github.access_token,
            timeout=config.timeout,
            session=self.session,
            verbose=config.debug,
        )

    def materializer(self, dirs: LauncherDirs) -> Materializer:
        return Materializer(
            dirs.versions_dir,
            self.locator,
            self.fetcher,
            platform_info=self.platform_info,
            lock_timeout=self.config.lock_timeout,
            verbose=self.config.debug,
        )

    def prepare(self) -> Path:
        """
        Resolve the configured branch and make its binary available.

        Returns:
            Path to the executable launcher binary
        """
        dirs = ensure_launcher_dirs(self.home_dir, self.config.network)
        branch = self.config.branch

        with error_stage("get branch head"):
            version_id = self.resolver.resolve(branch)

        if self.config.debug:
            logger.info(f"Network: {self.config.network} ({dirs.network_dir})")

        return self.materializer(dirs).ensure_local(
            branch, version_id, self.platform_info.platform_key()
        )

    def run(self, executable: Path, args: Sequence[str]) -> int:
        """
        Run executable with args, inheriting stdin, stdout and stderr.

        Returns:
            The child's exit code; 128 + signal number if it was killed
        """
        cmd: List[str] = [str(executable), *args]
        logger.debug(f"Running: {cmd}")
        try:
            process = subprocess.Popen(cmd)
        except OSError as e:
            raise FilesystemError(f"run {executable}: {e}") from e

        while True:
            try:
                returncode = process.wait()
                break
            except KeyboardInterrupt:
                # The child shares the terminal and got the same SIGINT
                continue

        if returncode < 0:
            return 128 - returncode
        return returncode

    def start(self, args: Sequence[str]) -> int:
        """
        Bootstrap and hand off to the launcher binary.

        Args:
            args: Command-line arguments without the program name

        Returns:
            Exit code of the launcher binary
        """
        executable = self.prepare()

        if list(args) == ["version"]:
            print(f"opendex-launcher {__version__}")

        return self.run(executable, args)


__all__ = ["Launcher"]
