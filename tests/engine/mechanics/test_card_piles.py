"""Tests for the card pile helpers."""

from magical_vortex.engine.core.entities import AbilityCard, Card, Player
from magical_vortex.engine.core.game_state import GameState
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.mechanics.card_piles import (
    deal_opening,
    discard_from_hand,
    draw_cards,
    recycle_discard,
    refill_hand,
    replace_vortex_card,
)
from magical_vortex.ir.abilities import EffectTag
from magical_vortex.ir.cards import CardColor, CardType, PlayerId


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _cards(prefix: str, n: int) -> list[Card]:
    return [
        Card(id=f"{prefix}-{i}", type=CardType.ATK, color=CardColor.BLACK, value=(i % 10) + 1)
        for i in range(n)
    ]


def _make_state(deck=20, discard=0, hand=0) -> GameState:
    return GameState(
        players={
            PlayerId.PLAYER: Player(id=PlayerId.PLAYER, life=40, power_hand=_cards("h", hand)),
            PlayerId.AI: Player(id=PlayerId.AI, life=40),
        },
        power_deck=_cards("d", deck),
        discard_pile=_cards("x", discard),
    )


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

class TestDraw:
    def test_draw_from_top(self):
        state = _make_state(deck=5)
        drawn = draw_cards(state, 2)
        assert [c.id for c in drawn] == ["d-0", "d-1"]
        assert len(state.power_deck) == 3

    def test_draw_more_than_deck(self):
        state = _make_state(deck=2)
        assert len(draw_cards(state, 5)) == 2
        assert state.power_deck == []

    def test_refill_to_hand_size(self):
        state = _make_state(deck=10, hand=2)
        drawn, recycled = refill_hand(state, PlayerId.PLAYER, GameRNG(1))
        assert len(drawn) == 3
        assert recycled == 0
        assert len(state.human.power_hand) == 5

    def test_refill_full_hand_draws_nothing(self):
        state = _make_state(deck=10, hand=5)
        drawn, _ = refill_hand(state, PlayerId.PLAYER, GameRNG(1))
        assert drawn == []
        assert len(state.power_deck) == 10

    def test_refill_respects_magic_knowledge(self):
        state = _make_state(deck=10)
        state.human.active_abilities = [AbilityCard.from_tag(EffectTag.MAGIC_KNOWLEDGE)]
        refill_hand(state, PlayerId.PLAYER, GameRNG(1))
        assert len(state.human.power_hand) == 6

    def test_refill_recycles_short_deck(self):
        state = _make_state(deck=2, discard=6)
        drawn, recycled = refill_hand(state, PlayerId.PLAYER, GameRNG(1))
        assert recycled == 6
        assert len(drawn) == 5
        assert state.discard_pile == []
        assert len(state.power_deck) == 3
        # The old deck stays on top
        assert [c.id for c in drawn[:2]] == ["d-0", "d-1"]

    def test_refill_with_everything_empty(self):
        state = _make_state(deck=0)
        drawn, recycled = refill_hand(state, PlayerId.PLAYER, GameRNG(1))
        assert drawn == []
        assert recycled == 0


# ---------------------------------------------------------------------------
# Discards and recycling
# ---------------------------------------------------------------------------

class TestDiscard:
    def test_discard_moves_card(self):
        state = _make_state(hand=3)
        card = discard_from_hand(state, PlayerId.PLAYER, "h-1")
        assert card.id == "h-1"
        assert state.discard_pile[-1].id == "h-1"
        assert len(state.human.power_hand) == 2

    def test_recycle_empties_discard(self):
        state = _make_state(deck=1, discard=4)
        assert recycle_discard(state, GameRNG(1)) == 4
        assert state.discard_pile == []
        assert state.power_deck[0].id == "d-0"
        assert len(state.power_deck) == 5


# ---------------------------------------------------------------------------
# Opening deal and the Vortex
# ---------------------------------------------------------------------------

class TestVortex:
    def test_deal_opening(self):
        state = _make_state(deck=20)
        deal_opening(state, hand_size=5, vortex_slots=4)
        assert len(state.human.power_hand) == 5
        assert len(state.ai.power_hand) == 5
        assert len(state.vortex) == 4
        assert len(state.power_deck) == 6

    def test_deal_opening_pads_empty_slots(self):
        state = _make_state(deck=11)
        deal_opening(state, hand_size=5, vortex_slots=4)
        assert state.vortex[0] is not None
        assert state.vortex[1:] == [None, None, None]

    def test_replace_vortex_card(self):
        state = _make_state(deck=5)
        deal_opening(state, hand_size=0, vortex_slots=4)
        old = state.vortex[2]
        new = replace_vortex_card(state, 2, GameRNG(1))
        assert state.discard_pile == [old]
        assert new.id == "d-4"
        assert state.power_deck == []

    def test_replace_vortex_recycles_discard(self):
        state = _make_state(deck=4)
        deal_opening(state, hand_size=0, vortex_slots=4)
        old = state.vortex[0]
        new = replace_vortex_card(state, 0, GameRNG(1))
        # The only card in the discard pile is the one just removed
        assert new == old
        assert state.discard_pile == []

    def test_conservation(self):
        state = _make_state(deck=20, discard=3)
        total = len(state.all_power_cards())
        deal_opening(state, hand_size=3, vortex_slots=4)
        replace_vortex_card(state, 1, GameRNG(1))
        refill_hand(state, PlayerId.AI, GameRNG(2))
        discard_from_hand(state, PlayerId.AI, state.ai.power_hand[0].id)
        ids = [c.id for c in state.all_power_cards()]
        assert len(ids) == total
        assert len(set(ids)) == total
