"""Relay server entry point (``throne-relay``)."""

from __future__ import annotations

import logging

import uvicorn

from throne.relay.config import RelaySettings, configure_logging
from throne.relay.server import create_app

_LOGGER = logging.getLogger(__name__)


def main() -> None:
    """Run the relay until interrupted."""
    settings = RelaySettings.from_env()
    configure_logging(settings.log_level)
    _LOGGER.info("Throne relay listening on %s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
