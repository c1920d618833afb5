"""Tiered heuristic opponent.

The AI gets stronger each round.  Every decision is a pure function of
the hand and the round so that a given position always produces the same
choice:

- **Level up**: never in round 1.  From round 2, an exhaustive power-set
  search for the cheapest subset reaching the threshold.  Round 3 first
  tries to keep its best attack card out of the search.
- **Ability draw**: round 3 only, paying with a card worth 2 or less.
- **Attack**: highest ATK card in rounds 1--2.  In round 3 it reserves the
  best N attack cards (N = attacks left) and leads with the weakest of them.
- **Defense**: highest DEF card in round 1, colour-aware matching in
  round 2, full combat simulation in round 3.
"""

from __future__ import annotations

import math
from itertools import combinations
from typing import TYPE_CHECKING

from magical_vortex.engine.mechanics.combat import resolve_direct
from magical_vortex.engine.play_agents.base import OpponentAgent
from magical_vortex.ir.cards import CardType

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import Card, Player

LEVEL_UP_THRESHOLD = 10

# Cards this weak are worth trading for an ability in round 3.
_WEAK_CARD_VALUE = 2

# Round 2 defense: score given to a block that still lets damage through.
_LEAK_PENALTY = -1000


# ---------------------------------------------------------------------------
# Level up
# ---------------------------------------------------------------------------

def _cheapest_subset(cards: list[Card], threshold: int) -> list[Card] | None:
    """Smallest-sum subset of *cards* reaching *threshold*.

    Ties on the sum go to the subset with fewer cards, then to the first
    one enumerated.  Hands are small, so all ``2**n`` subsets are checked.
    """
    best: list[Card] | None = None
    best_key: tuple[int, int] | None = None
    for size in range(1, len(cards) + 1):
        for subset in combinations(cards, size):
            total = sum(c.value for c in subset)
            if total < threshold:
                continue
            key = (total, size)
            if best_key is None or key < best_key:
                best, best_key = list(subset), key
    return best


def get_ai_level_up_cards(
    hand: list[Card],
    round_number: int,
    level: int,
    threshold: int = LEVEL_UP_THRESHOLD,
) -> list[Card] | None:
    """Cards the AI discards to level up, or ``None``.

    The AI never levels past the current round number.
    """
    if round_number <= 1 or level >= round_number:
        return None

    if round_number >= 3:
        attacks = [c for c in hand if c.type == CardType.ATK]
        if attacks:
            best_attack = max(attacks, key=lambda c: c.value)
            others = [c for c in hand if c.id != best_attack.id]
            selection = _cheapest_subset(others, threshold)
            if selection is not None:
                return selection

    return _cheapest_subset(hand, threshold)


# ---------------------------------------------------------------------------
# Ability draw
# ---------------------------------------------------------------------------

def get_ai_ability_discard(
    hand: list[Card],
    round_number: int,
    abilities_drawn: int,
) -> Card | None:
    """First card worth 2 or less, in round 3, once per turn."""
    if round_number < 3 or abilities_drawn >= 1:
        return None
    for card in hand:
        if card.value <= _WEAK_CARD_VALUE:
            return card
    return None


# ---------------------------------------------------------------------------
# Attack
# ---------------------------------------------------------------------------

def get_ai_attack_card(
    hand: list[Card],
    round_number: int,
    attacks_performed: int,
    max_attacks: int,
) -> Card | None:
    attacks = sorted(
        (c for c in hand if c.type == CardType.ATK),
        key=lambda c: c.value,
        reverse=True,
    )
    if not attacks:
        return None
    if round_number < 3:
        return attacks[0]

    remaining = max_attacks - attacks_performed
    if remaining <= 0:
        return None
    # Lead with the weakest of the reserved best cards to draw out defenses.
    return attacks[:remaining][-1]


# ---------------------------------------------------------------------------
# Defense
# ---------------------------------------------------------------------------

def _matching_score(defense: Card, attack: Card) -> int:
    effectiveness = defense.value
    if defense.color == attack.color:
        effectiveness = math.floor(defense.value / 2)
    margin = effectiveness - attack.value
    if margin < 0:
        return _LEAK_PENALTY + margin
    return -margin


def _simulated_loss(
    defense: Card,
    attack: Card,
    attacker: Player,
    defender: Player,
) -> int:
    """Life the defender loses; recoil onto the attacker counts as negative."""
    result = resolve_direct(attack, defense, attacker, defender)
    if result.target_id == defender.id:
        return result.damage
    if result.target_id == attacker.id:
        return -result.damage
    return 0


def get_ai_defense_card(
    hand: list[Card],
    attack_card: Card,
    round_number: int,
    attacker: Player,
    defender: Player,
) -> Card | None:
    defenses = [c for c in hand if c.type == CardType.DEF]
    if not defenses:
        return None

    if round_number <= 1:
        return max(defenses, key=lambda c: c.value)

    if round_number == 2:
        return max(defenses, key=lambda c: _matching_score(c, attack_card))

    best: Card | None = None
    best_key: tuple[int, int] | None = None
    for card in defenses:
        key = (_simulated_loss(card, attack_card, attacker, defender), card.value)
        if best_key is None or key < best_key:
            best, best_key = card, key
    return best


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------

class TieredHeuristicAgent(OpponentAgent):
    """The built-in AI opponent.  Difficulty follows the round number.

    Parameters
    ----------
    level_up_threshold:
        Minimum card total for a level up.
    """

    def __init__(self, level_up_threshold: int = LEVEL_UP_THRESHOLD) -> None:
        self._threshold = level_up_threshold

    def choose_level_up_cards(
        self,
        hand: list[Card],
        round_number: int,
        level: int,
    ) -> list[Card] | None:
        return get_ai_level_up_cards(hand, round_number, level, self._threshold)

    def choose_ability_discard(
        self,
        hand: list[Card],
        round_number: int,
        abilities_drawn: int,
    ) -> Card | None:
        return get_ai_ability_discard(hand, round_number, abilities_drawn)

    def choose_attack_card(
        self,
        hand: list[Card],
        round_number: int,
        attacks_performed: int,
        max_attacks: int,
    ) -> Card | None:
        return get_ai_attack_card(hand, round_number, attacks_performed, max_attacks)

    def choose_defense_card(
        self,
        hand: list[Card],
        attack_card: Card,
        round_number: int,
        attacker: Player,
        defender: Player,
    ) -> Card | None:
        return get_ai_defense_card(hand, attack_card, round_number, attacker, defender)
