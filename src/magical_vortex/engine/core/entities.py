"""Card and player models for the Magical Vortex engine.

All data classes use Pydantic v2 BaseModel for validation and
serialization.  Cards are frozen; a card "mutation" (Elemental or Magic
Control) replaces the instance with a copy that keeps the same ``id``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from magical_vortex.ir.abilities import AbilityKind, EffectTag, get_ability_definition
from magical_vortex.ir.cards import Affinity, CardColor, CardType, PlayerId
from magical_vortex.ir.characters import Character


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

class Card(BaseModel):
    """A single physical power card.

    Each of the 80 copies has its own ``id`` so it can be tracked across
    hands, the deck, the discard pile and the Vortex.
    """

    model_config = {"frozen": True}

    id: str
    type: CardType
    color: CardColor
    value: int = Field(ge=1, le=10)


class AbilityCard(BaseModel):
    """A single ability card.  Exactly one copy of each ability exists."""

    model_config = {"frozen": True}

    id: str
    effect_tag: EffectTag
    name: str
    level: int = Field(ge=1, le=3)
    affinity: Affinity

    @property
    def kind(self) -> AbilityKind:
        return get_ability_definition(self.effect_tag).kind

    @classmethod
    def from_tag(cls, tag: EffectTag, card_id: str | None = None) -> AbilityCard:
        """Build an ability card from its definition in the ability table."""
        definition = get_ability_definition(tag)
        return cls(
            id=card_id or f"ab-{definition.effect_tag.value}",
            effect_tag=definition.effect_tag,
            name=definition.name,
            level=definition.level,
            affinity=definition.affinity,
        )


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------

class Player(BaseModel):
    """One seat at the table (human or AI)."""

    id: PlayerId
    character: Character | None = None
    life: int
    base_life: int = 40
    """Max life before Magic Resistance.  40 for the human; the AI's value
    scales with the round."""

    level: int = Field(default=1, ge=1, le=3)
    base_hand_size: int = 5
    power_hand: list[Card] = Field(default_factory=list)
    ability_hand: list[AbilityCard] = Field(default_factory=list)
    active_abilities: list[AbilityCard] = Field(default_factory=list)
    permanent_shield: int | None = None
    """Magic Wall shield.  ``None`` means no shield; a shield that is worn
    down to 0 is cleared back to ``None``."""

    # -- per-turn counters (reset at the start of this player's turn) -------
    attacks_performed: int = 0
    vortex_attacks_performed: int = 0
    vortex_defenses_performed: int = 0
    level_ups_performed: int = 0
    abilities_drawn_this_turn: int = 0
    used_abilities_this_turn: list[str] = Field(default_factory=list)
    hand_revealed: bool = False
    """Magic Vision: the opponent's hand is visible to this player."""

    # -- queries -------------------------------------------------------------

    @property
    def is_dead(self) -> bool:
        return self.life <= 0

    @property
    def affinity(self) -> Affinity:
        if self.character is None:
            return Affinity.NEUTRAL
        return self.character.affinity_color

    def has_ability(self, tag: EffectTag) -> bool:
        """True if an ability with *tag* is in play (active zone)."""
        return any(a.effect_tag == tag for a in self.active_abilities)

    def holds_tag(self, tag: EffectTag) -> bool:
        """True if *tag* is active or waiting in the ability hand."""
        return self.has_ability(tag) or any(
            a.effect_tag == tag for a in self.ability_hand
        )

    def find_card(self, card_id: str) -> Card | None:
        for card in self.power_hand:
            if card.id == card_id:
                return card
        return None

    def find_active_ability(self, ability_id: str) -> AbilityCard | None:
        for ability in self.active_abilities:
            if ability.id == ability_id:
                return ability
        return None

    def find_held_ability(self, ability_id: str) -> AbilityCard | None:
        for ability in self.ability_hand:
            if ability.id == ability_id:
                return ability
        return None

    def has_card_type(self, card_type: CardType) -> bool:
        return any(c.type == card_type for c in self.power_hand)

    # -- mutations -----------------------------------------------------------

    def remove_card(self, card_id: str) -> Card:
        """Remove a card from the power hand by ``id`` and return it."""
        for i, card in enumerate(self.power_hand):
            if card.id == card_id:
                return self.power_hand.pop(i)
        raise ValueError(f"Card {card_id!r} not found in {self.id.value} hand")

    def replace_card(self, card: Card) -> None:
        """Swap the hand card sharing ``card.id`` for *card*."""
        for i, existing in enumerate(self.power_hand):
            if existing.id == card.id:
                self.power_hand[i] = card
                return
        raise ValueError(f"Card {card.id!r} not found in {self.id.value} hand")

    def lose_life(self, amount: int) -> None:
        """Subtract *amount* life, never going below 0."""
        if amount <= 0:
            return
        self.life = max(0, self.life - amount)

    def heal(self, amount: int, max_life: int) -> int:
        """Heal up to *max_life*.  Returns the life actually restored."""
        if amount <= 0:
            return 0
        before = self.life
        self.life = min(max_life, self.life + amount)
        return max(0, self.life - before)

    def reset_turn_counters(self) -> None:
        self.attacks_performed = 0
        self.vortex_attacks_performed = 0
        self.vortex_defenses_performed = 0
        self.level_ups_performed = 0
        self.abilities_drawn_this_turn = 0
        self.used_abilities_this_turn = []
        self.hand_revealed = False
