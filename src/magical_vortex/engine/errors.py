"""Rule errors raised by intent handlers.

Handlers raise on a private working copy of the state, so a raised error
never leaves a partial mutation behind.  :func:`~magical_vortex.engine.machine.transition`
turns them into an ignored intent or a user-facing warning.
"""

from __future__ import annotations


class GameRuleError(Exception):
    """Base class for every recoverable rule failure."""


class IllegalTransition(GameRuleError):
    """The intent is not valid in the current phase.  Ignored silently."""


class PreconditionViolation(GameRuleError):
    """The phase is right but a rule forbids the action.  Shown as a warning."""


class DataIntegrityGap(GameRuleError):
    """A referenced card or slot is missing.  The resolving transition
    backs out to a safe phase."""
