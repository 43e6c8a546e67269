"""
Entry point for running the launcher as a module.

Usage: python -m opendex_launcher [args forwarded to the launcher binary]
"""

from opendex_launcher.cli.entry import main

if __name__ == "__main__":
    main()
