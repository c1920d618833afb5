"""Tests for deck generation and the state factory."""

from collections import Counter

from magical_vortex.engine.config import EngineConfig
from magical_vortex.engine.core.factory import (
    POWER_DECK_SIZE,
    assign_character,
    create_initial_state,
    generate_ability_deck,
    generate_power_deck,
    starting_ability,
)
from magical_vortex.engine.core.game_state import MatchStatus, Phase
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.ir.abilities import EffectTag
from magical_vortex.ir.characters import get_character


class TestPowerDeck:
    def test_eighty_unique_cards(self):
        deck = generate_power_deck(GameRNG(1))
        assert POWER_DECK_SIZE == 80
        assert len(deck) == 80
        assert len({c.id for c in deck}) == 80

    def test_two_copies_of_each_combination(self):
        deck = generate_power_deck(GameRNG(1))
        counts = Counter((c.type, c.color, c.value) for c in deck)
        assert len(counts) == 40
        assert set(counts.values()) == {2}

    def test_shuffle_depends_on_seed(self):
        a = [c.id for c in generate_power_deck(GameRNG(1))]
        b = [c.id for c in generate_power_deck(GameRNG(1))]
        c = [c.id for c in generate_power_deck(GameRNG(2))]
        assert a == b
        assert a != c


class TestAbilityDeck:
    def test_one_copy_of_each(self):
        deck = generate_ability_deck(GameRNG(1))
        assert len(deck) == 18
        assert len({a.effect_tag for a in deck}) == 18
        assert len({a.id for a in deck}) == 18


class TestInitialState:
    def test_round_one(self):
        state = create_initial_state(EngineConfig(), GameRNG(1))
        assert state.phase == Phase.INIT
        assert state.status == MatchStatus.PRE_GAME
        assert state.human.life == 40
        assert state.ai.life == 40
        assert len(state.power_deck) == 80
        assert state.human.power_hand == []

    def test_ai_life_scales_with_round(self):
        state = create_initial_state(EngineConfig(), GameRNG(1), round_number=3)
        assert state.ai.life == 60
        assert state.ai.base_life == 60
        assert state.human.life == 40

    def test_token_carried_over(self):
        state = create_initial_state(EngineConfig(), GameRNG(1), action_token=17)
        assert state.action_token == 17

    def test_hand_size_from_config(self):
        state = create_initial_state(EngineConfig(hand_size=6), GameRNG(1))
        assert state.human.base_hand_size == 6


class TestAssignCharacter:
    def test_starting_ability_in_play(self):
        state = create_initial_state(EngineConfig(), GameRNG(1))
        druid = get_character("char1")
        assign_character(state.human, druid)
        assert state.human.character == druid
        assert [a.effect_tag for a in state.human.active_abilities] == [EffectTag.ELEMENTAL_CONTROL]
        assert state.human.active_abilities[0].id == "start-ELEMENTAL_CONTROL"

    def test_ability_deck_keeps_its_copy(self):
        state = create_initial_state(EngineConfig(), GameRNG(1))
        assign_character(state.human, get_character("char11"))
        assert any(a.effect_tag == EffectTag.MAGIC_WALL for a in state.ability_deck)
        assert len(state.ability_deck) == 18

    def test_starting_ability_id(self):
        assert starting_ability(get_character("char12")).id == "start-VORTEX_CONTROL"
