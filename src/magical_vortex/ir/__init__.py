"""Static content for Magical Vortex.

Card vocabulary, the ability table and the character roster are plain
Pydantic models and ``str`` enums that serialise cleanly to/from JSON.
"""

from .abilities import (
    ABILITY_DEFINITIONS,
    AbilityDefinition,
    AbilityKind,
    EffectTag,
    get_ability_definition,
)
from .cards import CARD_VALUES, COPIES_PER_CARD, Affinity, CardColor, CardType, PlayerId
from .characters import CHARACTERS, Character, get_character

__all__ = [
    # abilities
    "ABILITY_DEFINITIONS",
    "AbilityDefinition",
    "AbilityKind",
    "EffectTag",
    "get_ability_definition",
    # cards
    "Affinity",
    "CardColor",
    "CardType",
    "PlayerId",
    "CARD_VALUES",
    "COPIES_PER_CARD",
    # characters
    "CHARACTERS",
    "Character",
    "get_character",
]
