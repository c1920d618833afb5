"""The fixed roster of 12 playable characters."""

from __future__ import annotations

from pydantic import BaseModel

from .abilities import EffectTag
from .cards import Affinity


class Character(BaseModel):
    """A playable character.  Assigned once per match, never mutated."""

    model_config = {"frozen": True}

    id: str
    name: str
    affinity_color: Affinity
    starting_ability_tag: EffectTag


CHARACTERS: list[Character] = [
    # White affinity
    Character(id="char1", name="Druid", affinity_color=Affinity.WHITE,
              starting_ability_tag=EffectTag.ELEMENTAL_CONTROL),
    Character(id="char3", name="Angelus", affinity_color=Affinity.WHITE,
              starting_ability_tag=EffectTag.LIGHT_AFFINITY),
    Character(id="char5", name="Monk", affinity_color=Affinity.WHITE,
              starting_ability_tag=EffectTag.LIGHT_DEFENSE),
    Character(id="char8", name="LightingCat", affinity_color=Affinity.WHITE,
              starting_ability_tag=EffectTag.PALADIN_OF_LIGHT),
    # Black affinity
    Character(id="char2", name="Lizard", affinity_color=Affinity.BLACK,
              starting_ability_tag=EffectTag.MAGIC_CONTROL),
    Character(id="char4", name="Diabolus", affinity_color=Affinity.BLACK,
              starting_ability_tag=EffectTag.DARK_LORD),
    Character(id="char6", name="Insectoid", affinity_color=Affinity.BLACK,
              starting_ability_tag=EffectTag.DARK_DEFENSE),
    Character(id="char7", name="Necro", affinity_color=Affinity.BLACK,
              starting_ability_tag=EffectTag.DARK_AFFINITY),
    # Neutral affinity
    Character(id="char9", name="Shaman", affinity_color=Affinity.NEUTRAL,
              starting_ability_tag=EffectTag.MAGIC_VISION),
    Character(id="char10", name="Techno", affinity_color=Affinity.NEUTRAL,
              starting_ability_tag=EffectTag.MAGIC_KNOWLEDGE),
    Character(id="char11", name="Mystic", affinity_color=Affinity.NEUTRAL,
              starting_ability_tag=EffectTag.MAGIC_WALL),
    Character(id="char12", name="Elemental", affinity_color=Affinity.NEUTRAL,
              starting_ability_tag=EffectTag.VORTEX_CONTROL),
]


def get_character(character_id: str) -> Character | None:
    """Look up a roster entry by id, or ``None`` if it does not exist."""
    for character in CHARACTERS:
        if character.id == character_id:
            return character
    return None
