"""Typed rejections raised by the rule engine.

A rejected action never mutates the match: callers can tell "illegal
action" apart from "state changed" by catching :class:`RuleViolation`.
"""

from __future__ import annotations


class RuleViolation(Exception):
    """Base class for every rejected player action."""


class IllegalSelection(RuleViolation):
    """Clicked a cell without an own piece, or selected while armed."""


class IllegalDestination(RuleViolation):
    """Target cell is not in the cached legal set of the selection."""


class SacrificeUnavailable(RuleViolation):
    """Sacrifice already used, or the required pieces are missing."""


class InstantKillTargetInvalid(RuleViolation):
    """Target is not an enemy piece adjacent to an own piece."""


class ActionAfterGameOver(RuleViolation):
    """The match is over; only a reset is accepted."""


class SnapshotFormatError(ValueError):
    """A serialised snapshot could not be decoded."""
