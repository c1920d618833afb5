"""Headless match runner -- drives both seats of a match without a UI.

Provides two classes:

- **MatchRunner**: plays one match to completion.  The AI seat is the
  engine's own opponent agent; the human seat is piloted by a second
  agent through the same public intents a presentation layer would send.
- **BatchRunner**: runs many seeded matches (optionally in parallel).
"""

from __future__ import annotations

import logging
import multiprocessing

from magical_vortex.engine.config import EngineConfig
from magical_vortex.engine.core.game_state import Phase
from magical_vortex.engine.core.rng import GameRNG
from magical_vortex.engine.machine import GameEngine
from magical_vortex.engine.mechanics.modifiers import max_attacks
from magical_vortex.engine.play_agents.base import OpponentAgent
from magical_vortex.engine.play_agents.heuristic_agent import TieredHeuristicAgent
from magical_vortex.engine.play_agents.random_agent import RandomAgent
from magical_vortex.engine.telemetry import MatchTelemetry, rounds_from_log
from magical_vortex.ir.characters import CHARACTERS

logger = logging.getLogger(__name__)

_MAX_STEPS = 2000


def _make_agent(agent_class: type[OpponentAgent], rng: GameRNG) -> OpponentAgent:
    if agent_class.seeded:
        return agent_class(rng=rng)  # type: ignore[call-arg]
    return agent_class()


# =====================================================================
# MatchRunner
# =====================================================================

class MatchRunner:
    """Plays a single match between two agents.

    Parameters
    ----------
    player_agent:
        Pilot for the human seat.
    ai_agent:
        The AI opponent.
    config:
        Engine configuration; pacing delays are irrelevant here because
        continuations are fired immediately.
    character_id:
        Character for the human seat.  ``None`` picks one from the seed.
    """

    def __init__(
        self,
        player_agent: OpponentAgent,
        ai_agent: OpponentAgent,
        config: EngineConfig | None = None,
        character_id: str | None = None,
        max_steps: int = _MAX_STEPS,
    ) -> None:
        self.player_agent = player_agent
        self.ai_agent = ai_agent
        self.config = config or EngineConfig()
        self.character_id = character_id
        self.max_steps = max_steps

    def run_match(self, seed: int) -> MatchTelemetry:
        engine = GameEngine(self.config, seed=seed, agent=self.ai_agent)
        telemetry = MatchTelemetry(seed=seed)

        character_id = self.character_id
        if character_id is None:
            character_id = GameRNG(seed).fork("pilot").random_choice(CHARACTERS).id
        engine.start_game()
        engine.select_character(character_id)

        while telemetry.steps < self.max_steps:
            engine.run_pending()
            phase = engine.phase
            if phase == Phase.GAME_OVER:
                break
            if phase == Phase.ROUND_TRANSITION:
                engine.start_next_round()
            elif phase == Phase.MAIN_PHASE:
                self._play_main_phase(engine)
            elif phase == Phase.AWAITING_PLAYER_DEFENSE:
                self._defend(engine)
            else:
                logger.warning("Autopilot stuck in %s (seed %d)", phase.value, seed)
                break
            telemetry.steps += 1
        else:
            logger.warning("Match with seed %d hit the %d step limit", seed, self.max_steps)

        telemetry.rounds = rounds_from_log(engine.state.log)
        if telemetry.rounds:
            telemetry.final_result = telemetry.rounds[-1].result
        return telemetry

    # ------------------------------------------------------------------
    # Human seat autopilot
    # ------------------------------------------------------------------

    def _play_main_phase(self, engine: GameEngine) -> None:
        """Take one main-phase action: an attack, or end the turn."""
        state = engine.state
        human = state.human
        agent = self.player_agent

        if human.level_ups_performed == 0 and human.level < self.config.max_level:
            cards = agent.choose_level_up_cards(list(human.power_hand), state.round, human.level)
            if cards:
                engine.select_level_up_cards([c.id for c in cards])
                if not engine.confirm_level_up().committed:
                    engine.cancel()

        human = engine.state.human
        if human.abilities_drawn_this_turn == 0:
            card = agent.choose_ability_discard(
                list(human.power_hand), engine.state.round, human.abilities_drawn_this_turn
            )
            if card is not None:
                engine.draw_ability(card.id)

        for ability in list(engine.state.human.ability_hand):
            engine.play_ability(ability.id)

        human = engine.state.human
        if human.attacks_performed < max_attacks(human):
            card = agent.choose_attack_card(
                list(human.power_hand), engine.state.round,
                human.attacks_performed, max_attacks(human),
            )
            if card is not None:
                selected = engine.state.pending.attacking_card
                if selected is None or selected.id != card.id:
                    engine.select_card(card.id)
                if engine.confirm_attack().committed:
                    return
        engine.end_turn()

    def _defend(self, engine: GameEngine) -> None:
        state = engine.state
        attack_card = state.pending.attacking_card
        if attack_card is None:
            engine.choose_defense(None)
            return
        card = self.player_agent.choose_defense_card(
            list(state.human.power_hand), attack_card, state.round, state.ai, state.human
        )
        engine.choose_defense(card.id if card is not None else None)


# =====================================================================
# BatchRunner
# =====================================================================

def _run_single_match(
    player_class: type[OpponentAgent],
    ai_class: type[OpponentAgent],
    config: EngineConfig,
    seed: int,
) -> MatchTelemetry:
    rng = GameRNG(seed)
    runner = MatchRunner(
        player_agent=_make_agent(player_class, rng.fork("player_agent")),
        ai_agent=_make_agent(ai_class, rng.fork("ai_agent")),
        config=config,
    )
    return runner.run_match(seed)


def _worker_run_single(args: tuple) -> MatchTelemetry:
    """Top-level worker so ``multiprocessing`` can pickle it."""
    player_class, ai_class, config_json, seed = args
    return _run_single_match(
        player_class, ai_class, EngineConfig.model_validate_json(config_json), seed
    )


class BatchRunner:
    """Runs many matches between two agent classes."""

    def __init__(
        self,
        player_class: type[OpponentAgent] = RandomAgent,
        ai_class: type[OpponentAgent] = TieredHeuristicAgent,
        config: EngineConfig | None = None,
    ) -> None:
        self.player_class = player_class
        self.ai_class = ai_class
        self.config = config or EngineConfig()

    def run_batch(
        self,
        n_runs: int,
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[MatchTelemetry]:
        """Run *n_runs* matches with consecutive seeds."""
        seeds = [base_seed + i for i in range(n_runs)]
        if parallel and n_runs > 1:
            return self._run_parallel(seeds)
        return [
            _run_single_match(self.player_class, self.ai_class, self.config, seed)
            for seed in seeds
        ]

    def _run_parallel(self, seeds: list[int]) -> list[MatchTelemetry]:
        config_json = self.config.model_dump_json()
        work_items = [
            (self.player_class, self.ai_class, config_json, seed) for seed in seeds
        ]
        n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)
        with multiprocessing.Pool(processes=n_workers) as pool:
            return pool.map(_worker_run_single, work_items)
