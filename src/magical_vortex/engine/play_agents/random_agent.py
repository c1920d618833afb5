"""Random agent -- picks legal cards uniformly at random.

The ``RandomAgent`` is the baseline for batch runs and the default pilot
for the human seat in headless matches.  It verifies that the whole turn
loop works end-to-end and gives a lower bound for the tiered AI.

Behaviour:
    - Level up: shuffles the hand and takes cards until the total reaches
      the threshold (never in round 1, same level cap as the AI).
    - Ability draw: 50 % chance, paying with a random card.
    - Attack: a random ATK card, with a 10 % chance to stop attacking.
    - Defense: a random DEF card, with a 10 % chance to take the hit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.play_agents.base import OpponentAgent
from magical_vortex.engine.play_agents.heuristic_agent import LEVEL_UP_THRESHOLD
from magical_vortex.ir.cards import CardType

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import Card, Player


class RandomAgent(OpponentAgent):
    """Agent that makes random legal choices.

    Parameters
    ----------
    rng:
        Seeded RNG for deterministic randomness.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    pass_chance:
        Probability (0.0 -- 1.0) of declining an attack or a defense.
    """

    seeded = True

    def __init__(
        self,
        rng: GameRNG | None = None,
        pass_chance: float = 0.10,
    ) -> None:
        self._rng = rng or GameRNG(seed=0)
        self._pass_chance = pass_chance

    # ------------------------------------------------------------------
    # OpponentAgent interface
    # ------------------------------------------------------------------

    def choose_level_up_cards(
        self,
        hand: list[Card],
        round_number: int,
        level: int,
    ) -> list[Card] | None:
        if round_number <= 1 or level >= round_number:
            return None
        shuffled = list(hand)
        self._rng.shuffle(shuffled)
        selection: list[Card] = []
        total = 0
        for card in shuffled:
            selection.append(card)
            total += card.value
            if total >= LEVEL_UP_THRESHOLD:
                return selection
        return None

    def choose_ability_discard(
        self,
        hand: list[Card],
        round_number: int,
        abilities_drawn: int,
    ) -> Card | None:
        if not hand or abilities_drawn >= 1:
            return None
        if self._rng.random_float() >= 0.5:
            return None
        return self._rng.random_choice(hand)

    def choose_attack_card(
        self,
        hand: list[Card],
        round_number: int,
        attacks_performed: int,
        max_attacks: int,
    ) -> Card | None:
        attacks = [c for c in hand if c.type == CardType.ATK]
        if not attacks or attacks_performed >= max_attacks:
            return None
        if self._rng.random_float() < self._pass_chance:
            return None
        return self._rng.random_choice(attacks)

    def choose_defense_card(
        self,
        hand: list[Card],
        attack_card: Card,
        round_number: int,
        attacker: Player,
        defender: Player,
    ) -> Card | None:
        defenses = [c for c in hand if c.type == CardType.DEF]
        if not defenses:
            return None
        if self._rng.random_float() < self._pass_chance:
            return None
        return self._rng.random_choice(defenses)
