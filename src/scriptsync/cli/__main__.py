"""Main entry point for scriptsync CLI when run as a module."""

from scriptsync.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
