"""Logging setup shared by the command-line entry points."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Basic root logging; a no-op if the root logger is already set up."""
    logging.basicConfig(level=level, format=_LOG_FORMAT)
