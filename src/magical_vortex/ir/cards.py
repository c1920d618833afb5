"""Power card vocabulary -- the types and colours printed on every card."""

from __future__ import annotations

from enum import Enum


class CardType(str, Enum):
    """The two power card types."""

    ATK = "ATK"
    DEF = "DEF"


class CardColor(str, Enum):
    """Card colour.  Colour matching drives every combat formula."""

    BLACK = "BLACK"
    WHITE = "WHITE"

    @property
    def opposite(self) -> CardColor:
        return CardColor.WHITE if self is CardColor.BLACK else CardColor.BLACK


class Affinity(str, Enum):
    """Alignment of a character or an ability."""

    WHITE = "WHITE"
    BLACK = "BLACK"
    NEUTRAL = "NEUTRAL"


class PlayerId(str, Enum):
    """The two seats at the table."""

    PLAYER = "PLAYER"
    AI = "AI"

    @property
    def opponent(self) -> PlayerId:
        return PlayerId.AI if self is PlayerId.PLAYER else PlayerId.PLAYER


CARD_VALUES = range(1, 11)
"""Printed values on power cards (inclusive 1..10)."""

COPIES_PER_CARD = 2
"""Copies of each (type, colour, value) combination in the power deck."""
