"""Match state for the Magical Vortex engine.

``GameState`` is the single root of everything the engine knows about a
round in progress: both players, the three card piles, the Vortex, the
in-flight ``PendingAction`` and the append-only event log.  The state
machine never edits a committed ``GameState`` in place; each transition
works on a deep copy and replaces the whole object on success.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from magical_vortex.ir.cards import PlayerId
from magical_vortex.engine.core.entities import AbilityCard, Card, Player


# ---------------------------------------------------------------------------
# Phases and status
# ---------------------------------------------------------------------------

class MatchStatus(str, Enum):
    PRE_GAME = "PRE_GAME"
    PLAYING = "PLAYING"
    ROUND_OVER = "ROUND_OVER"
    GAME_OVER = "GAME_OVER"


class Phase(str, Enum):
    """States of the turn/phase machine."""

    INIT = "INIT"
    CHARACTER_SELECT = "CHARACTER_SELECT"
    START_GAME = "START_GAME"
    START_TURN = "START_TURN"
    DRAW_PHASE = "DRAW_PHASE"
    AI_TURN_LOGIC = "AI_TURN_LOGIC"
    MAIN_PHASE = "MAIN_PHASE"

    # Combat
    SELECT_ATTACK_CARD = "SELECT_ATTACK_CARD"
    AWAITING_AI_DEFENSE = "AWAITING_AI_DEFENSE"
    AWAITING_PLAYER_DEFENSE = "AWAITING_PLAYER_DEFENSE"
    RESOLVE_DIRECT_COMBAT = "RESOLVE_DIRECT_COMBAT"
    RESOLVE_VORTEX_COMBAT = "RESOLVE_VORTEX_COMBAT"

    # Discard payments
    SELECT_DISCARD_FOR_DRAW = "SELECT_DISCARD_FOR_DRAW"
    SELECT_DISCARD_FOR_WALL = "SELECT_DISCARD_FOR_WALL"
    SELECT_DISCARD_FOR_HEAL = "SELECT_DISCARD_FOR_HEAL"
    SELECT_DISCARD_FOR_VISION = "SELECT_DISCARD_FOR_VISION"
    SELECT_DISCARD_FOR_MIND = "SELECT_DISCARD_FOR_MIND"
    SELECT_DISCARD_FOR_MODIFICATION = "SELECT_DISCARD_FOR_MODIFICATION"
    SELECT_TARGET_FOR_MODIFICATION = "SELECT_TARGET_FOR_MODIFICATION"
    SELECT_DISCARD_GENERIC = "SELECT_DISCARD_GENERIC"

    # Level up
    SELECT_CARDS_FOR_LEVEL_UP = "SELECT_CARDS_FOR_LEVEL_UP"

    SHOWDOWN = "SHOWDOWN"
    ROUND_TRANSITION = "ROUND_TRANSITION"
    GAME_OVER = "GAME_OVER"


ABILITY_PAYMENT_PHASES = frozenset({
    Phase.SELECT_DISCARD_FOR_WALL,
    Phase.SELECT_DISCARD_FOR_HEAL,
    Phase.SELECT_DISCARD_FOR_VISION,
    Phase.SELECT_DISCARD_FOR_MIND,
    Phase.SELECT_DISCARD_FOR_MODIFICATION,
})
"""Phases in which the human is choosing the discard that pays for an
active ability."""


# ---------------------------------------------------------------------------
# PendingAction
# ---------------------------------------------------------------------------

class PendingKind(str, Enum):
    DIRECT_ATTACK = "DIRECT_ATTACK"
    VORTEX_ATTACK = "VORTEX_ATTACK"
    USE_ACTIVE_ABILITY = "USE_ACTIVE_ABILITY"


class PendingAction(BaseModel):
    """The attack, defense or ability payment currently in flight.

    The attacking and defending cards stay in their owners' hands until the
    turn is finalized; the pending action only references them.
    """

    kind: PendingKind | None = None
    attacker_id: PlayerId | None = None
    target_id: PlayerId | None = None
    attacking_card: Card | None = None
    defending_card: Card | None = None
    vortex_card_index: int | None = None
    """Vortex slot used for a Vortex attack."""

    vortex_defense_index: int | None = None
    """Vortex slot used for a Vortex defense (Vortex Control)."""

    target_ability: AbilityCard | None = None
    """Active ability waiting for its discard cost / target."""

    selected_card_ids: list[str] = Field(default_factory=list)
    """Cards tentatively earmarked for a level up."""


# ---------------------------------------------------------------------------
# Event log
# ---------------------------------------------------------------------------

class LogEvent(str, Enum):
    MATCH_START = "MATCH_START"
    ROUND_START = "ROUND_START"
    HANDS_DEALT = "HANDS_DEALT"
    TURN_START = "TURN_START"
    DECK_RECYCLED = "DECK_RECYCLED"
    CARDS_DRAWN = "CARDS_DRAWN"
    HAND_FULL = "HAND_FULL"
    ATTACK_DECLARED = "ATTACK_DECLARED"
    VORTEX_ATTACK_DECLARED = "VORTEX_ATTACK_DECLARED"
    DEFENSE_CHOSEN = "DEFENSE_CHOSEN"
    VORTEX_DEFENSE_CHOSEN = "VORTEX_DEFENSE_CHOSEN"
    NO_DEFENSE = "NO_DEFENSE"
    COMBAT_RESOLVED = "COMBAT_RESOLVED"
    COMBAT_ABORTED = "COMBAT_ABORTED"
    LEVEL_UP = "LEVEL_UP"
    CARD_DISCARDED = "CARD_DISCARDED"
    ABILITY_DRAWN = "ABILITY_DRAWN"
    NO_ABILITIES = "NO_ABILITIES"
    ABILITY_PLAYED = "ABILITY_PLAYED"
    ABILITY_ACTIVATING = "ABILITY_ACTIVATING"
    SHIELD_SET = "SHIELD_SET"
    HEALED = "HEALED"
    HAND_REVEALED = "HAND_REVEALED"
    MIND_CONTROL = "MIND_CONTROL"
    CARD_MODIFIED = "CARD_MODIFIED"
    TURN_END = "TURN_END"
    ROUND_WON = "ROUND_WON"
    GAME_OVER = "GAME_OVER"


class LogEntry(BaseModel):
    """One loggable occurrence.  Formatting is left to the presentation
    layer; ``data`` carries the numbers and ids involved."""

    event: LogEvent
    data: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# GameState
# ---------------------------------------------------------------------------

class GameState(BaseModel):
    """Full state of one round of a match."""

    status: MatchStatus = MatchStatus.PRE_GAME
    phase: Phase = Phase.INIT
    current_player: PlayerId = PlayerId.PLAYER
    winner: PlayerId | None = None
    round: int = Field(default=1, ge=1, le=3)

    players: dict[PlayerId, Player]
    power_deck: list[Card] = Field(default_factory=list)
    ability_deck: list[AbilityCard] = Field(default_factory=list)
    discard_pile: list[Card] = Field(default_factory=list)
    vortex: list[Card | None] = Field(default_factory=list)
    """Shared Vortex slots.  ``None`` marks a slot the deck could not refill."""

    log: list[LogEntry] = Field(default_factory=list)
    pending: PendingAction = Field(default_factory=PendingAction)
    status_message: str = ""
    action_token: int = 0
    """Bumped on every committed transition.  Scheduled continuations carry
    the token they were scheduled under and are dropped if it has moved."""

    # -- queries -------------------------------------------------------------

    @property
    def human(self) -> Player:
        return self.players[PlayerId.PLAYER]

    @property
    def ai(self) -> Player:
        return self.players[PlayerId.AI]

    def player(self, player_id: PlayerId) -> Player:
        return self.players[player_id]

    @property
    def active_player(self) -> Player:
        return self.players[self.current_player]

    def all_power_cards(self) -> list[Card]:
        """Every power card the state knows about, wherever it sits."""
        cards: list[Card] = []
        for player in self.players.values():
            cards.extend(player.power_hand)
        cards.extend(self.power_deck)
        cards.extend(self.discard_pile)
        cards.extend(c for c in self.vortex if c is not None)
        return cards

    # -- mutations -----------------------------------------------------------

    def add_log(self, event: LogEvent, **data: Any) -> None:
        self.log.append(LogEntry(event=event, data=data))

    def clear_pending(self) -> None:
        self.pending = PendingAction()
