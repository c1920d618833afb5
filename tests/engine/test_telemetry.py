"""Tests for folding the event log into telemetry."""

from magical_vortex.engine.core.game_state import LogEntry, LogEvent
from magical_vortex.engine.telemetry import MatchTelemetry, RoundTelemetry, rounds_from_log
from magical_vortex.ir.cards import PlayerId


def _entry(event: LogEvent, **data) -> LogEntry:
    return LogEntry(event=event, data=data)


class TestRoundsFromLog:
    def test_empty_log(self):
        assert rounds_from_log([]) == []

    def test_events_before_first_turn_ignored(self):
        log = [_entry(LogEvent.MATCH_START), _entry(LogEvent.HANDS_DEALT)]
        assert rounds_from_log(log) == []

    def test_single_round(self):
        log = [
            _entry(LogEvent.TURN_START, player=PlayerId.PLAYER, round=1),
            _entry(LogEvent.COMBAT_RESOLVED, target=PlayerId.AI, damage=7, absorbed=0),
            _entry(LogEvent.TURN_START, player=PlayerId.AI, round=1),
            _entry(LogEvent.COMBAT_RESOLVED, target=PlayerId.AI, damage=1, absorbed=2),
            _entry(LogEvent.COMBAT_RESOLVED, target=PlayerId.PLAYER, damage=4, absorbed=0),
            _entry(LogEvent.COMBAT_RESOLVED, target=None, damage=0, absorbed=0),
            _entry(LogEvent.ROUND_WON, round=1),
        ]
        (round_one,) = rounds_from_log(log)
        assert round_one.turns == 2
        assert round_one.combats == 4
        assert round_one.damage_to_ai == 8
        assert round_one.damage_to_player == 4
        assert round_one.absorbed == 2
        assert round_one.result == "win"

    def test_rounds_split_on_round_number(self):
        log = [
            _entry(LogEvent.TURN_START, player=PlayerId.PLAYER, round=1),
            _entry(LogEvent.ROUND_WON, round=1),
            _entry(LogEvent.TURN_START, player=PlayerId.PLAYER, round=2),
            _entry(LogEvent.LEVEL_UP, player=PlayerId.AI, level=2),
            _entry(LogEvent.LEVEL_UP, player=PlayerId.PLAYER, level=2),
            _entry(LogEvent.ABILITY_DRAWN, player=PlayerId.PLAYER),
            _entry(LogEvent.GAME_OVER, winner=PlayerId.AI),
        ]
        first, second = rounds_from_log(log)
        assert first.result == "win"
        assert second.round == 2
        assert second.ai_level == 2
        assert second.player_level == 2
        assert second.abilities_drawn == 1
        assert second.result == "loss"


class TestMatchTelemetry:
    def test_properties(self):
        match = MatchTelemetry(
            seed=1,
            rounds=[RoundTelemetry(round=1, result="win"), RoundTelemetry(round=2, result="loss")],
        )
        assert match.rounds_reached == 2
        assert match.rounds_won == 1
