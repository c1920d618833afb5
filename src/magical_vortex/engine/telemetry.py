"""Telemetry data models for per-round and per-match statistics.

These lightweight dataclasses capture what is needed to compare AI
difficulty tiers without storing the state history:

- **RoundTelemetry**: outcome, turns, damage each way, level ups.
- **MatchTelemetry**: seed, ordered round results, final outcome.

Both are plain ``dataclass`` instances (not Pydantic models) to keep
collection cheap during batch runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from magical_vortex.engine.core.game_state import LogEntry, LogEvent
from magical_vortex.ir.cards import PlayerId


@dataclass
class RoundTelemetry:
    """Stats from a single round.

    Attributes
    ----------
    round:
        Round number (1 -- 3).
    result:
        ``"win"`` if the human knocked the AI out, ``"loss"`` if the human
        fell, ``"unfinished"`` if the run stopped first.
    turns:
        Turns started by either seat.
    damage_to_ai, damage_to_player:
        Life lost by each seat (recoil included).
    absorbed:
        Damage soaked up by Magic Wall shields.
    player_level, ai_level:
        Highest level each seat reached.
    """

    round: int
    result: str = "unfinished"
    turns: int = 0
    damage_to_ai: int = 0
    damage_to_player: int = 0
    absorbed: int = 0
    combats: int = 0
    player_level: int = 1
    ai_level: int = 1
    abilities_drawn: int = 0


@dataclass
class MatchTelemetry:
    """Stats from a full match.

    Attributes
    ----------
    seed:
        Engine seed used for this match.
    rounds:
        One entry per round played.
    final_result:
        ``"win"``, ``"loss"`` or ``"unfinished"``.
    steps:
        Autopilot decisions taken (guards against runaway matches).
    """

    seed: int
    rounds: list[RoundTelemetry] = field(default_factory=list)
    final_result: str = "unfinished"
    steps: int = 0

    @property
    def rounds_reached(self) -> int:
        return len(self.rounds)

    @property
    def rounds_won(self) -> int:
        return sum(1 for r in self.rounds if r.result == "win")


def rounds_from_log(log: list[LogEntry]) -> list[RoundTelemetry]:
    """Fold a match's event log into per-round telemetry."""
    rounds: list[RoundTelemetry] = []
    current: RoundTelemetry | None = None

    for entry in log:
        data = entry.data
        if entry.event == LogEvent.TURN_START:
            if current is None or data.get("round", current.round) != current.round:
                current = RoundTelemetry(round=data.get("round", 1))
                rounds.append(current)
            current.turns += 1
        if current is None:
            continue

        if entry.event == LogEvent.COMBAT_RESOLVED:
            current.combats += 1
            current.absorbed += data.get("absorbed", 0)
            if data.get("target") == PlayerId.AI:
                current.damage_to_ai += data.get("damage", 0)
            elif data.get("target") == PlayerId.PLAYER:
                current.damage_to_player += data.get("damage", 0)
        elif entry.event == LogEvent.LEVEL_UP:
            if data.get("player") == PlayerId.AI:
                current.ai_level = max(current.ai_level, data.get("level", 1))
            else:
                current.player_level = max(current.player_level, data.get("level", 1))
        elif entry.event == LogEvent.ABILITY_DRAWN:
            current.abilities_drawn += 1
        elif entry.event == LogEvent.ROUND_WON:
            current.result = "win"
        elif entry.event == LogEvent.GAME_OVER:
            current.result = "win" if data.get("winner") == PlayerId.PLAYER else "loss"

    return rounds
