"""Tests for EngineConfig."""

import json

import pytest
from pydantic import ValidationError

from magical_vortex.engine.config import EngineConfig


class TestDefaults:
    def test_rule_constants(self):
        config = EngineConfig()
        assert config.hand_size == 5
        assert config.initial_life == 40
        assert config.vortex_slots == 4
        assert config.level_up_threshold == 10
        assert config.max_level == 3
        assert config.final_round == 3

    def test_ai_life_by_round(self):
        config = EngineConfig()
        assert [config.ai_life(r) for r in (1, 2, 3)] == [40, 50, 60]

    def test_ai_life_falls_back_to_initial_life(self):
        config = EngineConfig(initial_life=30, ai_life_by_round={})
        assert config.ai_life(2) == 30


class TestValidation:
    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(hand_sise=6)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(draw_delay=-0.1)

    def test_max_level_bounded(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_level=4)


class TestLoad:
    def test_partial_override(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"hand_size": 6, "showdown_delay": 0}))
        config = EngineConfig.load(path)
        assert config.hand_size == 6
        assert config.showdown_delay == 0
        assert config.initial_life == 40

    def test_round_keys_from_json(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"ai_life_by_round": {"1": 20, "2": 25}}))
        config = EngineConfig.load(str(path))
        assert config.ai_life(2) == 25
        assert config.ai_life(3) == 40
