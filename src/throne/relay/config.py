"""Relay server settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from throne.log import configure_logging
from throne.relay.rooms import DEFAULT_GRACE_SECONDS

__all__ = ["RelaySettings", "configure_logging"]


@dataclass
class RelaySettings:
    """All relay-server settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    grace_period_seconds: float = DEFAULT_GRACE_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelaySettings:
        """Read ``PORT`` and ``THRONE_*`` overrides from the environment."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("THRONE_HOST", defaults.host),
            port=int(env.get("PORT", defaults.port)),
            grace_period_seconds=float(
                env.get("THRONE_GRACE_SECONDS", defaults.grace_period_seconds)
            ),
            log_level=env.get("THRONE_LOG_LEVEL", defaults.log_level).upper(),
        )
