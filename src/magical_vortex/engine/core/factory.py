"""Deck generation and the per-round state factory."""

from __future__ import annotations

from magical_vortex.engine.config import EngineConfig
from magical_vortex.engine.core.entities import AbilityCard, Card, Player
from magical_vortex.engine.core.game_state import GameState, MatchStatus, Phase
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.ir.abilities import ABILITY_DEFINITIONS
from magical_vortex.ir.cards import CARD_VALUES, COPIES_PER_CARD, CardColor, CardType, PlayerId
from magical_vortex.ir.characters import Character

POWER_DECK_SIZE = len(CardColor) * len(CardType) * len(CARD_VALUES) * COPIES_PER_CARD
"""80: two copies of every value, type and colour."""


def generate_power_deck(rng: GameRNG) -> list[Card]:
    """Create and shuffle the 80-card power deck."""
    deck: list[Card] = []
    counter = 1
    for color in CardColor:
        for card_type in CardType:
            for value in CARD_VALUES:
                for _ in range(COPIES_PER_CARD):
                    deck.append(
                        Card(id=f"c-{counter}", type=card_type, color=color, value=value)
                    )
                    counter += 1
    rng.shuffle(deck)
    return deck


def generate_ability_deck(rng: GameRNG) -> list[AbilityCard]:
    """Create and shuffle the ability deck (one copy of each ability)."""
    deck = [
        AbilityCard.from_tag(definition.effect_tag, card_id=f"ab-{i}-{definition.effect_tag.value}")
        for i, definition in enumerate(ABILITY_DEFINITIONS)
    ]
    rng.shuffle(deck)
    return deck


def starting_ability(character: Character) -> AbilityCard:
    """The ability a character enters every round with."""
    tag = character.starting_ability_tag
    return AbilityCard.from_tag(tag, card_id=f"start-{tag.value}")


def _make_player(player_id: PlayerId, life: int, config: EngineConfig) -> Player:
    return Player(
        id=player_id,
        life=life,
        base_life=life,
        base_hand_size=config.hand_size,
    )


def assign_character(player: Player, character: Character) -> None:
    """Seat *character* and put its starting ability into play.

    The starting ability is a separate copy; the ability deck keeps its own.
    """
    player.character = character
    player.active_abilities = [starting_ability(character)]


def create_initial_state(
    config: EngineConfig,
    rng: GameRNG,
    round_number: int = 1,
    action_token: int = 0,
) -> GameState:
    """Build a fresh round: shuffled decks, both players at level 1.

    Characters are not assigned here; see :func:`assign_character`.
    """
    players = {
        PlayerId.PLAYER: _make_player(PlayerId.PLAYER, config.initial_life, config),
        PlayerId.AI: _make_player(PlayerId.AI, config.ai_life(round_number), config),
    }
    return GameState(
        status=MatchStatus.PRE_GAME,
        phase=Phase.INIT,
        current_player=PlayerId.PLAYER,
        round=round_number,
        players=players,
        power_deck=generate_power_deck(rng.stream("decks", round_number, action_token)),
        ability_deck=generate_ability_deck(rng.stream("abilities", round_number, action_token)),
        action_token=action_token,
        status_message="Welcome.",
    )
