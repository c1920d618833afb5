"""Card pile manipulation helpers.

Every move between a hand, the power deck, the discard pile and the
Vortex goes through these functions so that each of the 80 power cards
is always in exactly one place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from magical_vortex.engine.mechanics.modifiers import get_max_hand_size

if TYPE_CHECKING:
    from magical_vortex.engine.core.entities import Card
    from magical_vortex.engine.core.game_state import GameState
    from magical_vortex.engine.core.rng import GameRNG
    from magical_vortex.ir.cards import PlayerId


def recycle_discard(state: GameState, rng: GameRNG) -> int:
    """Shuffle the discard pile and put it under the power deck.

    Returns the number of cards recycled.
    """
    recycled = list(state.discard_pile)
    state.discard_pile.clear()
    rng.shuffle(recycled)
    state.power_deck.extend(recycled)
    return len(recycled)


def draw_cards(state: GameState, n: int) -> list[Card]:
    """Move up to *n* cards from the top of the power deck.

    Returns the cards taken (fewer than *n* if the deck runs out).  The
    caller decides where they go.
    """
    drawn = state.power_deck[:n]
    del state.power_deck[:n]
    return drawn


def refill_hand(state: GameState, player_id: PlayerId, rng: GameRNG) -> tuple[list[Card], int]:
    """Draw *player_id* back up to their max hand size.

    If the deck holds fewer cards than the hand-size cap, the discard pile
    is recycled first.  Returns ``(drawn, recycled_count)``.
    """
    player = state.player(player_id)
    cap = get_max_hand_size(player)
    recycled = 0
    if len(state.power_deck) < cap and state.discard_pile:
        recycled = recycle_discard(state, rng)
    needed = cap - len(player.power_hand)
    if needed <= 0:
        return [], recycled
    drawn = draw_cards(state, needed)
    player.power_hand.extend(drawn)
    return drawn, recycled


def discard_from_hand(state: GameState, player_id: PlayerId, card_id: str) -> Card:
    """Move a card from *player_id*'s hand to the discard pile."""
    card = state.player(player_id).remove_card(card_id)
    state.discard_pile.append(card)
    return card


def deal_opening(state: GameState, hand_size: int, vortex_slots: int) -> None:
    """Deal both opening hands, then form the Vortex from the deck."""
    for player in state.players.values():
        player.power_hand = draw_cards(state, hand_size)
    state.vortex = list(draw_cards(state, vortex_slots))
    while len(state.vortex) < vortex_slots:
        state.vortex.append(None)


def replace_vortex_card(state: GameState, index: int, rng: GameRNG) -> Card | None:
    """Discard the card in Vortex slot *index* and refill it from the deck.

    An empty deck is replenished from the discard pile first.  Returns the
    new slot content (``None`` if no card was available at all).
    """
    old = state.vortex[index]
    if old is not None:
        state.discard_pile.append(old)
    if not state.power_deck and state.discard_pile:
        recycle_discard(state, rng)
    drawn = draw_cards(state, 1)
    state.vortex[index] = drawn[0] if drawn else None
    return state.vortex[index]
