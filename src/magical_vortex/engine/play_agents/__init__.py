"""Agents that make decisions for a seat.

Re-exports the base class and all concrete agent implementations so
consumers can do::

    from magical_vortex.engine.play_agents import OpponentAgent, TieredHeuristicAgent
"""

from .base import OpponentAgent
from .heuristic_agent import (
    TieredHeuristicAgent,
    get_ai_ability_discard,
    get_ai_attack_card,
    get_ai_defense_card,
    get_ai_level_up_cards,
)
from .random_agent import RandomAgent

__all__ = [
    "OpponentAgent",
    "RandomAgent",
    "TieredHeuristicAgent",
    "get_ai_ability_discard",
    "get_ai_attack_card",
    "get_ai_defense_card",
    "get_ai_level_up_cards",
]
