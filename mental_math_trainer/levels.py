from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_CORRECT = 20
MAX_MISTAKES_START = 5
MAX_MISTAKES_FLOOR = 2
LEVELS_PER_MISTAKE_STEP = 3
FAIL_BADLY_BELOW = 10


class RoundOutcome(str, Enum):
    PASSED = "passed"
    FAILED_BADLY = "failed_badly"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LevelRequirement:
    min_correct: int
    max_mistakes: int

    def is_met(self, *, correct: int, mistakes: int) -> bool:
        return correct >= self.min_correct and mistakes <= self.max_mistakes


def min_correct(level: int) -> int:
    # Constant across levels.
    _check_level(level)
    return MIN_CORRECT


def max_mistakes(level: int) -> int:
    """Allowed mistakes: 5 at level 1, one fewer every 3 levels, never below 2."""

    _check_level(level)
    return max(MAX_MISTAKES_FLOOR, MAX_MISTAKES_START - (level - 1) // LEVELS_PER_MISTAKE_STEP)


def level_requirement(level: int) -> LevelRequirement:
    return LevelRequirement(min_correct=min_correct(level), max_mistakes=max_mistakes(level))


def evaluate_round(
    *,
    level: int,
    correct: int,
    mistakes: int,
    fail_badly_below: int = FAIL_BADLY_BELOW,
) -> tuple[RoundOutcome, int]:
    """Return (outcome, new_level) for a finished round at ``level``."""

    req = level_requirement(level)
    if req.is_met(correct=correct, mistakes=mistakes):
        return RoundOutcome.PASSED, level + 1
    if correct < fail_badly_below:
        return RoundOutcome.FAILED_BADLY, max(1, level - 1)
    return RoundOutcome.FAILED, level


def _check_level(level: int) -> None:
    if level < 1:
        raise ValueError("level must be >= 1")
