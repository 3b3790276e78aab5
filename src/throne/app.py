"""Application entry point."""

from __future__ import annotations

import sys


def main() -> None:
    """Launch the Throne desktop application."""
    from throne.log import configure_logging
    from throne.ui.bootstrap import run_application

    configure_logging()
    sys.exit(run_application())


if __name__ == "__main__":
    main()
