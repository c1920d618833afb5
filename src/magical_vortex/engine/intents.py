"""Inbound intents accepted by the state machine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class IntentType(str, Enum):
    # -- issued by the presentation layer ----------------------------------
    START_GAME = "START_GAME"
    SELECT_CHARACTER = "SELECT_CHARACTER"
    SELECT_ATTACK_CARD = "SELECT_ATTACK_CARD"
    CONFIRM_DIRECT_ATTACK = "CONFIRM_DIRECT_ATTACK"
    CHOOSE_DEFENSE_CARD = "CHOOSE_DEFENSE_CARD"
    CHOOSE_VORTEX_SLOT = "CHOOSE_VORTEX_SLOT"
    ACTIVATE_ABILITY = "ACTIVATE_ABILITY"
    PLAY_ABILITY_FROM_HAND = "PLAY_ABILITY_FROM_HAND"
    SELECT_CARDS_FOR_LEVEL_UP = "SELECT_CARDS_FOR_LEVEL_UP"
    CONFIRM_LEVEL_UP = "CONFIRM_LEVEL_UP"
    DISCARD_CARD = "DISCARD_CARD"
    CHOOSE_MODIFICATION_TARGET = "CHOOSE_MODIFICATION_TARGET"
    DRAW_ABILITY = "DRAW_ABILITY"
    END_TURN = "END_TURN"
    CANCEL_PENDING_ACTION = "CANCEL_PENDING_ACTION"
    START_NEXT_ROUND = "START_NEXT_ROUND"

    # -- scheduled continuations -------------------------------------------
    DRAW_TICK = "DRAW_TICK"
    AI_TURN_TICK = "AI_TURN_TICK"
    AI_DEFENSE_TICK = "AI_DEFENSE_TICK"
    RESOLVE_COMBAT_TICK = "RESOLVE_COMBAT_TICK"
    FINALIZE_TURN_TICK = "FINALIZE_TURN_TICK"

    @property
    def is_continuation(self) -> bool:
        return self in _CONTINUATIONS


_CONTINUATIONS = frozenset({
    IntentType.DRAW_TICK,
    IntentType.AI_TURN_TICK,
    IntentType.AI_DEFENSE_TICK,
    IntentType.RESOLVE_COMBAT_TICK,
    IntentType.FINALIZE_TURN_TICK,
})


class Intent(BaseModel):
    """One request to move the game forward.

    Only the fields relevant to ``kind`` are read.
    """

    kind: IntentType
    card_id: str | None = None
    card_ids: list[str] = Field(default_factory=list)
    ability_id: str | None = None
    character_id: str | None = None
    slot: int | None = None
    """Vortex slot index (CHOOSE_VORTEX_SLOT)."""

    for_defense: bool = False
    """CHOOSE_VORTEX_SLOT: defend through the Vortex instead of attacking."""

    token: int | None = None
    """Action token a continuation was scheduled under."""
