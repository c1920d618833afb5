"""Core primitives for the Magical Vortex engine."""

from magical_vortex.engine.core.entities import AbilityCard, Card, Player
from magical_vortex.engine.core.factory import (
    POWER_DECK_SIZE,
    assign_character,
    create_initial_state,
    generate_ability_deck,
    generate_power_deck,
    starting_ability,
)
from magical_vortex.engine.core.game_state import (
    ABILITY_PAYMENT_PHASES,
    GameState,
    LogEntry,
    LogEvent,
    MatchStatus,
    PendingAction,
    PendingKind,
    Phase,
)
from magical_vortex.engine.core.rng import GameRNG

__all__ = [
    # rng
    "GameRNG",
    # entities
    "Card",
    "AbilityCard",
    "Player",
    # game_state
    "ABILITY_PAYMENT_PHASES",
    "GameState",
    "LogEntry",
    "LogEvent",
    "MatchStatus",
    "PendingAction",
    "PendingKind",
    "Phase",
    # factory
    "POWER_DECK_SIZE",
    "assign_character",
    "create_initial_state",
    "generate_ability_deck",
    "generate_power_deck",
    "starting_ability",
]
