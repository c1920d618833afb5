"""Tests for GameState and PendingAction."""

from magical_vortex.engine.core.entities import Card, Player
from magical_vortex.engine.core.game_state import (
    GameState,
    LogEvent,
    PendingAction,
    PendingKind,
    Phase,
)
from magical_vortex.ir.cards import CardColor, CardType, PlayerId


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _card(card_id: str, value: int = 5) -> Card:
    return Card(id=card_id, type=CardType.ATK, color=CardColor.WHITE, value=value)


def _make_state(**kwargs) -> GameState:
    players = {
        PlayerId.PLAYER: Player(id=PlayerId.PLAYER, life=40, power_hand=[_card("h-1")]),
        PlayerId.AI: Player(id=PlayerId.AI, life=40, power_hand=[_card("a-1")]),
    }
    defaults = dict(
        players=players,
        power_deck=[_card("d-1"), _card("d-2")],
        discard_pile=[_card("x-1")],
        vortex=[_card("v-1"), None, _card("v-3"), _card("v-4")],
    )
    defaults.update(kwargs)
    return GameState(**defaults)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_defaults(self):
        state = _make_state()
        assert state.phase == Phase.INIT
        assert state.round == 1
        assert state.action_token == 0
        assert state.pending == PendingAction()

    def test_player_accessors(self):
        state = _make_state(current_player=PlayerId.AI)
        assert state.human.id == PlayerId.PLAYER
        assert state.ai.id == PlayerId.AI
        assert state.active_player is state.ai
        assert state.player(PlayerId.PLAYER) is state.human

    def test_all_power_cards_skips_empty_vortex_slots(self):
        ids = sorted(c.id for c in _make_state().all_power_cards())
        assert ids == ["a-1", "d-1", "d-2", "h-1", "v-1", "v-3", "v-4", "x-1"]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

class TestMutations:
    def test_add_log(self):
        state = _make_state()
        state.add_log(LogEvent.CARDS_DRAWN, player=PlayerId.PLAYER, count=3)
        assert state.log[-1].event == LogEvent.CARDS_DRAWN
        assert state.log[-1].data == {"player": PlayerId.PLAYER, "count": 3}

    def test_clear_pending(self):
        state = _make_state()
        state.pending = PendingAction(kind=PendingKind.DIRECT_ATTACK, attacking_card=_card("h-1"))
        state.clear_pending()
        assert state.pending.kind is None
        assert state.pending.attacking_card is None

    def test_deep_copy_is_independent(self):
        state = _make_state()
        copy = state.model_copy(deep=True)
        copy.human.power_hand.clear()
        copy.human.life = 1
        copy.vortex[0] = None
        assert len(state.human.power_hand) == 1
        assert state.human.life == 40
        assert state.vortex[0] is not None

    def test_json_round_trip(self):
        state = _make_state()
        state.add_log(LogEvent.TURN_START, player=PlayerId.AI, round=1)
        restored = GameState.model_validate_json(state.model_dump_json())
        assert restored.all_power_cards() == state.all_power_cards()
        assert restored.log[0].event == LogEvent.TURN_START
