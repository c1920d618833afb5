"""Ability definitions -- the 18 unique ability cards.

Every ability is identified by its :class:`EffectTag`.  The tag is the only
key the engine dispatches on; ``name`` and ``description`` exist for the
presentation layer.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .cards import Affinity


class EffectTag(str, Enum):
    """Symbolic identifier of an ability's effect."""

    # Neutral
    MAGIC_WALL = "MAGIC_WALL"
    MAGIC_VISION = "MAGIC_VISION"
    MAGIC_KNOWLEDGE = "MAGIC_KNOWLEDGE"
    MAGIC_RESISTANCE = "MAGIC_RESISTANCE"
    MIND_CONTROL = "MIND_CONTROL"
    ELEMENTAL_CONTROL = "ELEMENTAL_CONTROL"
    MAGIC_CONTROL = "MAGIC_CONTROL"
    VORTEX_CONTROL = "VORTEX_CONTROL"
    MASTER_AFFINITY = "MASTER_AFFINITY"
    MASTER_VORTEX = "MASTER_VORTEX"

    # White
    LIGHT_DEFENSE = "LIGHT_DEFENSE"
    PALADIN_OF_LIGHT = "PALADIN_OF_LIGHT"
    LIGHT_AFFINITY = "LIGHT_AFFINITY"
    ACOLYTE_OF_LIGHT = "ACOLYTE_OF_LIGHT"

    # Black
    DARK_DEFENSE = "DARK_DEFENSE"
    DARK_LORD = "DARK_LORD"
    DARK_AFFINITY = "DARK_AFFINITY"
    DARK_SERVANT = "DARK_SERVANT"


class AbilityKind(str, Enum):
    """Whether an ability is consulted (passive) or triggered (active)."""

    PASSIVE = "PASSIVE"
    """Read by the combat resolver and capacity checks; never activated."""

    ACTIVE = "ACTIVE"
    """Activated from the active-abilities zone by paying a discard."""


class AbilityDefinition(BaseModel):
    """Complete definition of a single ability card."""

    effect_tag: EffectTag
    name: str
    level: int
    """Minimum player level required to hold or play the ability (1-3)."""

    affinity: Affinity
    kind: AbilityKind
    description: str


ABILITY_DEFINITIONS: list[AbilityDefinition] = [
    # -- neutral --------------------------------------------------------------
    AbilityDefinition(
        effect_tag=EffectTag.MAGIC_WALL, name="Magic Wall", level=1,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard a card to create a permanent shield.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MAGIC_VISION, name="Magic Vision", level=1,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard 1. Reveal opponent hand.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MAGIC_KNOWLEDGE, name="Magic Knowledge", level=1,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.PASSIVE,
        description="Max Hand Size +Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MAGIC_RESISTANCE, name="Magic Resistance", level=1,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.PASSIVE,
        description="Max HP +10 per Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MIND_CONTROL, name="Mind Control", level=2,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard 1. Opponent discards N cards.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.ELEMENTAL_CONTROL, name="Elemental Control", level=2,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard 1. Change card color.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MAGIC_CONTROL, name="Magic Control", level=2,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard 1. Change card type.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.VORTEX_CONTROL, name="Vortex Control", level=2,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.PASSIVE,
        description="Use Vortex for Defense once per turn.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MASTER_AFFINITY, name="Master Affinity", level=3,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.ACTIVE,
        description="Discard 1. Heal full Value.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.MASTER_VORTEX, name="Master Vortex", level=3,
        affinity=Affinity.NEUTRAL, kind=AbilityKind.PASSIVE,
        description="Use Vortex for Attack unlimited times.",
    ),
    # -- white ----------------------------------------------------------------
    AbilityDefinition(
        effect_tag=EffectTag.LIGHT_DEFENSE, name="Light Defense", level=1,
        affinity=Affinity.WHITE, kind=AbilityKind.PASSIVE,
        description="White Def cards +Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.PALADIN_OF_LIGHT, name="Paladin of Light", level=1,
        affinity=Affinity.WHITE, kind=AbilityKind.PASSIVE,
        description="White Atk cards +Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.LIGHT_AFFINITY, name="Light Affinity", level=2,
        affinity=Affinity.WHITE, kind=AbilityKind.ACTIVE,
        description="Discard White card. Heal Value/2 + Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.ACOLYTE_OF_LIGHT, name="Acolyte of Light", level=3,
        affinity=Affinity.WHITE, kind=AbilityKind.PASSIVE,
        description="Reduce incoming White Atk by half.",
    ),
    # -- black ----------------------------------------------------------------
    AbilityDefinition(
        effect_tag=EffectTag.DARK_DEFENSE, name="Dark Defense", level=1,
        affinity=Affinity.BLACK, kind=AbilityKind.PASSIVE,
        description="Black Def cards +Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.DARK_LORD, name="Dark Lord", level=1,
        affinity=Affinity.BLACK, kind=AbilityKind.PASSIVE,
        description="Black Atk cards +Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.DARK_AFFINITY, name="Dark Affinity", level=2,
        affinity=Affinity.BLACK, kind=AbilityKind.ACTIVE,
        description="Discard Black card. Heal Value/2 + Level.",
    ),
    AbilityDefinition(
        effect_tag=EffectTag.DARK_SERVANT, name="Dark Servant", level=3,
        affinity=Affinity.BLACK, kind=AbilityKind.PASSIVE,
        description="Reduce incoming Black Atk by half.",
    ),
]

_BY_TAG: dict[EffectTag, AbilityDefinition] = {
    ability.effect_tag: ability for ability in ABILITY_DEFINITIONS
}


def get_ability_definition(tag: EffectTag) -> AbilityDefinition:
    """Return the definition for *tag*.  Raises ``KeyError`` if unknown."""
    return _BY_TAG[EffectTag(tag)]
