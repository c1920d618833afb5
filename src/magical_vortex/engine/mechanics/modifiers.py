"""Passive ability modifiers.

Passive abilities never act on their own; these helpers are what the
combat resolver, the draw phase and the acquisition checks consult.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from magical_vortex.ir.abilities import EffectTag
from magical_vortex.ir.cards import Affinity, CardColor, CardType

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import AbilityCard, Card, Player

# Abilities that add the holder's level to their own cards of one type+colour.
_VALUE_BUFFS: dict[EffectTag, tuple[CardType, CardColor]] = {
    EffectTag.DARK_DEFENSE: (CardType.DEF, CardColor.BLACK),
    EffectTag.LIGHT_DEFENSE: (CardType.DEF, CardColor.WHITE),
    EffectTag.DARK_LORD: (CardType.ATK, CardColor.BLACK),
    EffectTag.PALADIN_OF_LIGHT: (CardType.ATK, CardColor.WHITE),
}

# Abilities that halve incoming attacks of one colour.
_INCOMING_HALVING: dict[EffectTag, CardColor] = {
    EffectTag.DARK_SERVANT: CardColor.BLACK,
    EffectTag.ACOLYTE_OF_LIGHT: CardColor.WHITE,
}

_MAGIC_RESISTANCE_PER_LEVEL = 10


def get_modified_value(card: Card, player: Player) -> int:
    """Card value plus every matching "+level" buff *player* has in play."""
    value = card.value
    for tag, (card_type, color) in _VALUE_BUFFS.items():
        if card.type == card_type and card.color == color and player.has_ability(tag):
            value += player.level
    return value


def apply_incoming_halving(attack_value: int, attack_card: Card, defender: Player) -> int:
    """Halve (floor) *attack_value* if *defender* resists the card's colour."""
    for tag, color in _INCOMING_HALVING.items():
        if attack_card.color == color and defender.has_ability(tag):
            attack_value = math.floor(attack_value / 2)
    return attack_value


def get_max_life(player: Player) -> int:
    """Base life, plus 10 per level with Magic Resistance."""
    max_life = player.base_life
    if player.has_ability(EffectTag.MAGIC_RESISTANCE):
        max_life += player.level * _MAGIC_RESISTANCE_PER_LEVEL
    return max_life


def get_max_hand_size(player: Player) -> int:
    """Base hand size, plus the player's level with Magic Knowledge."""
    size = player.base_hand_size
    if player.has_ability(EffectTag.MAGIC_KNOWLEDGE):
        size += player.level
    return size


def max_attacks(player: Player) -> int:
    """Direct attacks allowed per turn."""
    return 1 + player.level


def ability_capacity(player: Player) -> int:
    """Size of the active-abilities zone.

    Neutral characters get one slot per level; aligned characters get one
    extra.
    """
    if player.affinity == Affinity.NEUTRAL:
        return player.level
    return player.level + 1


def is_affinity_compatible(player: Player, ability: AbilityCard) -> bool:
    """Neutral characters may hold anything; aligned characters hold
    neutral abilities and abilities of their own colour."""
    if player.affinity == Affinity.NEUTRAL:
        return True
    return ability.affinity in (Affinity.NEUTRAL, player.affinity)


def can_vortex_attack(player: Player) -> bool:
    if player.has_ability(EffectTag.MASTER_VORTEX):
        return True
    return player.vortex_attacks_performed < 1


def can_vortex_defend(player: Player) -> bool:
    return (
        player.has_ability(EffectTag.VORTEX_CONTROL)
        and player.vortex_defenses_performed < 1
    )


def is_drawable(player: Player, ability: AbilityCard) -> bool:
    """Level, duplicate and affinity filters for drawing *ability*."""
    if ability.level > player.level:
        return False
    if player.holds_tag(ability.effect_tag):
        return False
    return is_affinity_compatible(player, ability)


def eligible_ability_indices(player: Player, ability_deck: list[AbilityCard]) -> list[int]:
    """Indices into *ability_deck* that *player* may draw."""
    return [i for i, ability in enumerate(ability_deck) if is_drawable(player, ability)]


def play_block_reason(player: Player, ability: AbilityCard) -> str | None:
    """Why *ability* cannot move from the ability hand into play, if at all."""
    if player.level < ability.level:
        return "Level too low to use this ability."
    if player.has_ability(ability.effect_tag):
        return f"{ability.name} is already active. Abilities cannot be repeated."
    if not is_affinity_compatible(player, ability):
        return f"{ability.name} does not match your character's affinity."
    if len(player.active_abilities) >= ability_capacity(player):
        return "Active ability limit reached."
    return None
