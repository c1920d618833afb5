"""Shared fixtures for engine tests."""

from __future__ import annotations

import pytest

from magical_vortex.engine.config import EngineConfig
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.machine import GameEngine, TransitionContext
from magical_vortex.engine.play_agents.heuristic_agent import TieredHeuristicAgent


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def ctx(config: EngineConfig) -> TransitionContext:
    """Context for driving :func:`transition` directly."""
    return TransitionContext(config=config, rng=GameRNG(42), agent=TieredHeuristicAgent())


@pytest.fixture
def engine(config: EngineConfig) -> GameEngine:
    return GameEngine(config, seed=7)


@pytest.fixture
def started_engine(engine: GameEngine) -> GameEngine:
    """Engine in the human's first main phase (Shaman, neutral)."""
    engine.start_game()
    engine.select_character("char9")
    engine.run_pending()
    return engine
