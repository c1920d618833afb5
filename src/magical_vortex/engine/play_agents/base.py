"""Base class for the decision procedures that drive a seat.

The state machine calls these at the AI's decision points; the headless
runner also uses them to pilot the human seat.  Every method receives
plain card lists and the current round so that the procedures stay
stateless and can be unit tested without a ``GameState``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import Card, Player


class OpponentAgent(ABC):
    """Base class for agents that play one seat of the game."""

    seeded: bool = False
    """Whether the constructor takes an ``rng`` keyword."""

    @abstractmethod
    def choose_level_up_cards(
        self,
        hand: list[Card],
        round_number: int,
        level: int,
    ) -> list[Card] | None:
        """Choose the cards to discard for a level up.

        Parameters
        ----------
        hand:
            The agent's power hand.
        round_number:
            Current round (1 -- 3).
        level:
            The agent's current level.

        Returns
        -------
        list[Card] | None
            Cards whose values sum to at least 10, or ``None`` to skip.
        """

    @abstractmethod
    def choose_ability_discard(
        self,
        hand: list[Card],
        round_number: int,
        abilities_drawn: int,
    ) -> Card | None:
        """Choose a card to discard in exchange for an ability draw.

        Returns ``None`` to skip drawing this turn.
        """

    @abstractmethod
    def choose_attack_card(
        self,
        hand: list[Card],
        round_number: int,
        attacks_performed: int,
        max_attacks: int,
    ) -> Card | None:
        """Choose the ATK card for the next direct attack.

        Returns ``None`` to stop attacking this turn.
        """

    @abstractmethod
    def choose_defense_card(
        self,
        hand: list[Card],
        attack_card: Card,
        round_number: int,
        attacker: Player,
        defender: Player,
    ) -> Card | None:
        """Choose a DEF card against *attack_card*.

        Parameters
        ----------
        hand:
            The defender's power hand.
        attack_card:
            The incoming attack card.
        round_number:
            Current round (1 -- 3).
        attacker, defender:
            Player snapshots, for agents that simulate the exchange.

        Returns
        -------
        Card | None
            The defense card, or ``None`` to take the hit.
        """
