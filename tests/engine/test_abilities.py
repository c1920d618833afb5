"""Tests for the active ability effect table."""

import pytest

from magical_vortex.engine.abilities import (
    EFFECT_HANDLERS,
    check_activation,
    get_effect_handler,
    modify_card,
    pay_and_resolve,
)
from magical_vortex.engine.core.entities import AbilityCard, Card, Player
from magical_vortex.engine.core.game_state import GameState, LogEvent, Phase
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.errors import PreconditionViolation
from magical_vortex.ir.abilities import ABILITY_DEFINITIONS, AbilityKind, EffectTag
from magical_vortex.ir.cards import CardColor, CardType, PlayerId


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _card(card_id: str, value: int = 6, color: CardColor = CardColor.WHITE,
          card_type: CardType = CardType.DEF) -> Card:
    return Card(id=card_id, type=card_type, color=color, value=value)


def _make_state(tag: EffectTag, level: int = 1, life: int = 40, hand=None) -> GameState:
    ability = AbilityCard.from_tag(tag)
    human = Player(
        id=PlayerId.PLAYER,
        life=life,
        level=level,
        power_hand=hand if hand is not None else [_card("h-1"), _card("h-2", 9, CardColor.BLACK)],
        active_abilities=[ability],
    )
    ai = Player(
        id=PlayerId.AI,
        life=40,
        power_hand=[_card(f"a-{i}") for i in range(4)],
    )
    return GameState(players={PlayerId.PLAYER: human, PlayerId.AI: ai})


def _pay(state: GameState, card_id: str, seed: int = 1):
    ability = state.human.active_abilities[0]
    return pay_and_resolve(state, PlayerId.PLAYER, ability, card_id, GameRNG(seed))


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class TestHandlerTable:
    def test_every_active_ability_has_a_handler(self):
        active = {d.effect_tag for d in ABILITY_DEFINITIONS if d.kind == AbilityKind.ACTIVE}
        assert set(EFFECT_HANDLERS) == active
        assert len(active) == 8

    def test_passive_has_no_handler(self):
        assert get_effect_handler(EffectTag.DARK_LORD) is None

    @pytest.mark.parametrize("tag, phase", [
        (EffectTag.MAGIC_WALL, Phase.SELECT_DISCARD_FOR_WALL),
        (EffectTag.LIGHT_AFFINITY, Phase.SELECT_DISCARD_FOR_HEAL),
        (EffectTag.MASTER_AFFINITY, Phase.SELECT_DISCARD_FOR_HEAL),
        (EffectTag.MAGIC_VISION, Phase.SELECT_DISCARD_FOR_VISION),
        (EffectTag.MIND_CONTROL, Phase.SELECT_DISCARD_FOR_MIND),
        (EffectTag.MAGIC_CONTROL, Phase.SELECT_DISCARD_FOR_MODIFICATION),
    ])
    def test_discard_phase(self, tag, phase):
        assert get_effect_handler(tag).discard_phase == phase

    def test_modifications_need_target(self):
        assert get_effect_handler(EffectTag.ELEMENTAL_CONTROL).needs_target
        assert not get_effect_handler(EffectTag.MAGIC_WALL).needs_target


# ---------------------------------------------------------------------------
# Activation checks
# ---------------------------------------------------------------------------

class TestCheckActivation:
    def test_passive_refused(self):
        state = _make_state(EffectTag.DARK_LORD)
        with pytest.raises(PreconditionViolation, match="passive"):
            check_activation(state.human, state.human.active_abilities[0])

    def test_once_per_turn(self):
        state = _make_state(EffectTag.MAGIC_VISION)
        ability = state.human.active_abilities[0]
        state.human.used_abilities_this_turn.append(ability.id)
        with pytest.raises(PreconditionViolation, match="already used"):
            check_activation(state.human, ability)

    def test_needs_a_card(self):
        state = _make_state(EffectTag.MAGIC_VISION, hand=[])
        with pytest.raises(PreconditionViolation):
            check_activation(state.human, state.human.active_abilities[0])

    @pytest.mark.parametrize("tag", [EffectTag.ELEMENTAL_CONTROL, EffectTag.MAGIC_CONTROL])
    def test_modification_needs_two_cards(self, tag):
        state = _make_state(tag, level=2, hand=[_card("h-1")])
        with pytest.raises(PreconditionViolation, match="another card to modify"):
            check_activation(state.human, state.human.active_abilities[0])

    def test_modification_with_two_cards(self):
        state = _make_state(EffectTag.ELEMENTAL_CONTROL, level=2)
        handler = check_activation(state.human, state.human.active_abilities[0])
        assert handler.needs_target

    def test_wall_refused_while_shield_stands(self):
        state = _make_state(EffectTag.MAGIC_WALL)
        state.human.permanent_shield = 2
        with pytest.raises(PreconditionViolation, match="Shield"):
            check_activation(state.human, state.human.active_abilities[0])

    def test_returns_handler(self):
        state = _make_state(EffectTag.MAGIC_WALL)
        handler = check_activation(state.human, state.human.active_abilities[0])
        assert handler is EFFECT_HANDLERS[EffectTag.MAGIC_WALL]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

class TestEffects:
    def test_wall_sets_shield(self):
        state = _make_state(EffectTag.MAGIC_WALL)
        _pay(state, "h-2")
        assert state.human.permanent_shield == 9
        assert state.discard_pile[-1].id == "h-2"
        assert [c.id for c in state.human.power_hand] == ["h-1"]
        assert state.log[-1].event == LogEvent.SHIELD_SET

    def test_payment_marks_used(self):
        state = _make_state(EffectTag.MAGIC_WALL)
        _pay(state, "h-1")
        assert state.human.used_abilities_this_turn == ["ab-MAGIC_WALL"]
        assert any(e.event == LogEvent.CARD_DISCARDED for e in state.log)

    def test_light_affinity_heal(self):
        state = _make_state(EffectTag.LIGHT_AFFINITY, level=2, life=30)
        _pay(state, "h-1")
        # floor(6 / 2) + 2
        assert state.human.life == 35

    def test_light_affinity_wrong_color(self):
        state = _make_state(EffectTag.LIGHT_AFFINITY, level=2, life=30)
        with pytest.raises(PreconditionViolation, match="WHITE"):
            _pay(state, "h-2")
        assert len(state.human.power_hand) == 2
        assert state.human.used_abilities_this_turn == []

    def test_dark_affinity_requires_black(self):
        state = _make_state(EffectTag.DARK_AFFINITY, level=2, life=30)
        with pytest.raises(PreconditionViolation):
            _pay(state, "h-1")
        _pay(state, "h-2")
        # floor(9 / 2) + 2
        assert state.human.life == 36

    def test_heal_capped_at_max_life(self):
        state = _make_state(EffectTag.MASTER_AFFINITY, level=3, life=36)
        _pay(state, "h-2")
        assert state.human.life == 40
        healed = state.log[-1]
        assert healed.event == LogEvent.HEALED
        assert healed.data["restored"] == 4

    def test_vision_reveals_hand(self):
        state = _make_state(EffectTag.MAGIC_VISION)
        _pay(state, "h-1")
        assert state.human.hand_revealed

    def test_mind_control_discards_level_cards(self):
        state = _make_state(EffectTag.MIND_CONTROL, level=3)
        _pay(state, "h-1")
        assert len(state.ai.power_hand) == 1
        # Cost card plus three forced discards
        assert len(state.discard_pile) == 4
        assert state.log[-1].data["count"] == 3

    def test_mind_control_stops_at_empty_hand(self):
        state = _make_state(EffectTag.MIND_CONTROL, level=3)
        state.ai.power_hand = state.ai.power_hand[:1]
        _pay(state, "h-1")
        assert state.ai.power_hand == []
        assert state.log[-1].data["count"] == 1

    def test_mind_control_is_seeded(self):
        a = _make_state(EffectTag.MIND_CONTROL, level=2)
        b = _make_state(EffectTag.MIND_CONTROL, level=2)
        _pay(a, "h-1", seed=11)
        _pay(b, "h-1", seed=11)
        assert [c.id for c in a.ai.power_hand] == [c.id for c in b.ai.power_hand]

    def test_missing_card(self):
        state = _make_state(EffectTag.MAGIC_VISION)
        with pytest.raises(PreconditionViolation):
            _pay(state, "nope")


# ---------------------------------------------------------------------------
# Card modification
# ---------------------------------------------------------------------------

class TestModifyCard:
    def test_elemental_control_flips_color(self):
        card = _card("h-1", color=CardColor.WHITE)
        flipped = modify_card(EffectTag.ELEMENTAL_CONTROL, card)
        assert flipped.color == CardColor.BLACK
        assert flipped.id == card.id
        assert flipped.value == card.value

    def test_magic_control_flips_type(self):
        card = _card("h-1", card_type=CardType.DEF)
        assert modify_card(EffectTag.MAGIC_CONTROL, card).type == CardType.ATK

    def test_other_tags_refused(self):
        with pytest.raises(ValueError):
            modify_card(EffectTag.MAGIC_WALL, _card("h-1"))
