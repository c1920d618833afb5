"""Engine configuration.

A single Pydantic model holds the rule constants and the pacing delays
used when scheduling continuations.  Defaults reproduce the standard game;
a JSON file can override any subset of them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Rule constants and pacing for one engine instance."""

    model_config = {"extra": "forbid"}

    hand_size: int = Field(default=5, ge=1)
    """Base power hand size (before Magic Knowledge)."""

    initial_life: int = Field(default=40, ge=1)
    """Human starting (and base max) life."""

    ai_life_by_round: dict[int, int] = Field(
        default_factory=lambda: {1: 40, 2: 50, 3: 60}
    )
    """AI starting life for each round."""

    vortex_slots: int = Field(default=4, ge=1)
    level_up_threshold: int = Field(default=10, ge=1)
    max_level: int = Field(default=3, ge=1, le=3)
    final_round: int = Field(default=3, ge=1, le=3)

    # -- pacing (seconds) ------------------------------------------------------
    draw_delay: float = Field(default=0.5, ge=0)
    ai_turn_delay: float = Field(default=1.0, ge=0)
    ai_defense_delay: float = Field(default=1.0, ge=0)
    resolve_delay: float = Field(default=0.5, ge=0)
    resolve_after_ai_defense_delay: float = Field(default=1.0, ge=0)
    showdown_delay: float = Field(default=3.0, ge=0)

    def ai_life(self, round_number: int) -> int:
        """AI starting life for *round_number*, falling back to the human's."""
        return self.ai_life_by_round.get(round_number, self.initial_life)

    @classmethod
    def load(cls, path: Path | str) -> EngineConfig:
        """Read and validate a JSON config file."""
        return cls.model_validate_json(Path(path).read_text())
