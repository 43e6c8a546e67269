"""
Command-line entry point of the opendex launcher.

Every argument is forwarded to the launcher binary untouched, so there is no
argument parsing here: configuration comes from ``launcher.yaml`` and the
environment.
"""

import logging
import sys
import traceback
from typing import List, Mapping, Optional

from opendex_launcher.config.settings import load_config
from opendex_launcher.core.directory import get_home_dir
from opendex_launcher.launcher.runner import Launcher

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """
    Configure logging for the launcher process.

    Debug mode shows every pipeline step; otherwise only warnings and
    errors reach stderr so the launcher binary's own output stays clean.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(levelname)s [%(name)s] %(message)s"
    else:
        level = logging.WARNING
        format_str = "%(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Reconfigure if already configured
    )


def run(
    args: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> int:
    """
    Bootstrap and run the launcher binary.

    Args:
        args: Arguments to forward (uses sys.argv[1:] if None)
        environ: Environment mapping (uses os.environ if None)

    Returns:
        Exit code of the launcher binary, 1 on launcher-side errors
    """
    if args is None:
        args = sys.argv[1:]

    debug = False
    configure_logging(debug)

    try:
        home_dir = get_home_dir()
        config = load_config(home_dir, environ)
        debug = config.debug
        configure_logging(debug)

        return Launcher(config, home_dir).start(args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.error(f"Error: {e}")
        if debug:
            traceback.print_exc()
        return 1


def main():
    """Main entry point for the opendex-launcher console script."""
    sys.exit(run())


if __name__ == "__main__":
    main()
