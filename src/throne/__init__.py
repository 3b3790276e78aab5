"""Throne — a two-player tactics game on a 5x5 board."""

__version__ = "0.1.0"
