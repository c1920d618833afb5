"""Delay-based continuation queue.

Several transitions hand control back only after a pause (the AI
"thinking", the showdown display).  The machine describes each pause as a
:class:`Continuation` and this scheduler releases them when a virtual
clock reaches their due time.  Nothing here sleeps; the owner advances
the clock explicitly.
"""

from __future__ import annotations

import heapq
import itertools

from pydantic import BaseModel, Field

from magical_vortex.engine.core.game_state import Phase
from magical_vortex.engine.intents import Intent, IntentType


# ---------------------------------------------------------------------------
# Continuation (value object)
# ---------------------------------------------------------------------------

class Continuation(BaseModel):
    """An internal intent waiting for its delay to elapse.

    Parameters
    ----------
    kind:
        The continuation intent to dispatch.
    token:
        ``GameState.action_token`` at scheduling time.  The continuation
        is stale once the token has moved on.
    phase:
        Phase the state was in when the continuation was scheduled.
    delay:
        Seconds to wait before firing.
    """

    kind: IntentType
    token: int
    phase: Phase
    delay: float = Field(default=0.0, ge=0)

    def to_intent(self) -> Intent:
        return Intent(kind=self.kind, token=self.token)


# ---------------------------------------------------------------------------
# ContinuationScheduler
# ---------------------------------------------------------------------------

class ContinuationScheduler:
    """Min-heap of continuations ordered by due time, then insertion order.

    This is a plain Python class (not a Pydantic model) because it holds
    mutable internal state that should not be serialized.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, Continuation]] = []
        self._seq = itertools.count()
        self._now = 0.0

    # -- mutations -----------------------------------------------------------

    def schedule(self, continuation: Continuation) -> float:
        """Queue *continuation* and return its due time."""
        due = self._now + continuation.delay
        heapq.heappush(self._heap, (due, next(self._seq), continuation))
        return due

    def pop_due(self, until: float) -> Continuation | None:
        """Pop the earliest continuation due at or before *until*.

        The clock jumps to that continuation's due time.  Returns ``None``
        if nothing is due.
        """
        if not self._heap or self._heap[0][0] > until:
            return None
        due, _, continuation = heapq.heappop(self._heap)
        self._now = max(self._now, due)
        return continuation

    def pop_next(self) -> Continuation | None:
        """Pop the earliest continuation regardless of its due time."""
        if not self._heap:
            return None
        return self.pop_due(self._heap[0][0])

    def advance_clock(self, to: float) -> None:
        self._now = max(self._now, to)

    def clear(self) -> None:
        """Discard all scheduled continuations.  The clock keeps its value."""
        self._heap.clear()

    # -- queries -------------------------------------------------------------

    @property
    def now(self) -> float:
        return self._now

    @property
    def is_empty(self) -> bool:
        return len(self._heap) == 0

    def peek_due(self) -> float | None:
        return self._heap[0][0] if self._heap else None

    def __len__(self) -> int:
        return len(self._heap)

    def __repr__(self) -> str:
        return f"ContinuationScheduler(now={self._now}, pending={len(self._heap)})"
