"""Round lifecycle, scoring and level progression for the drill.

``RoundController`` is a small state machine:

  IDLE -> ACTIVE -> COMPLETE -> ACTIVE -> ...

A round lasts ``round_duration_s`` whole seconds.  The countdown is a
``PeriodicTimer`` owned by the controller; the host calls :meth:`update` from
its frame loop and the controller converts elapsed intervals into
:meth:`tick` calls.  When the countdown reaches zero the round is evaluated
once and the level is raised, lowered or kept, and written back to the
``LevelStore`` only when it changed.

Answer feedback is returned as a value with a ``clear_after_s`` window; the
caller is responsible for calling :meth:`clear_feedback` once it has shown the
message for that long.  Time is entirely via the injected Clock.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .clock import Clock, PeriodicTimer
from .levels import FAIL_BADLY_BELOW, LevelRequirement, RoundOutcome, evaluate_round, level_requirement
from .problems import GeneratorConfig, Problem, ProblemGenerator, target_range
from .storage import KeyValueStore, LevelStore

logger = logging.getLogger(__name__)

MSG_CORRECT = "Correct!"
MSG_WRONG = "Try again!"
MSG_INVALID = "Please enter a valid number!"


class RoundPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class RoundConfig:
    round_duration_s: int = 60
    tick_interval_s: float = 1.0
    feedback_clear_s: float = 0.5
    answer_tolerance: float = 0.001
    fail_badly_below: int = FAIL_BADLY_BELOW

    def __post_init__(self) -> None:
        if self.round_duration_s <= 0:
            raise ValueError("round_duration_s must be > 0")
        if self.tick_interval_s <= 0:
            raise ValueError("tick_interval_s must be > 0")
        if self.feedback_clear_s < 0:
            raise ValueError("feedback_clear_s must be >= 0")
        if self.answer_tolerance <= 0:
            raise ValueError("answer_tolerance must be > 0")


@dataclass(frozen=True, slots=True)
class Feedback:
    message: str
    is_correct: bool | None  # None for invalid input
    clear_after_s: float = 0.5


@dataclass(frozen=True, slots=True)
class RoundResult:
    outcome: RoundOutcome
    previous_level: int
    new_level: int
    correct: int
    mistakes: int
    requirement: LevelRequirement

    @property
    def passed(self) -> bool:
        return self.outcome is RoundOutcome.PASSED

    @property
    def level_changed(self) -> bool:
        return self.new_level != self.previous_level


@dataclass(frozen=True, slots=True)
class RoundSnapshot:
    """View model for the UI (pure data)."""

    phase: RoundPhase
    level: int
    target_range: int
    requirement: LevelRequirement
    time_left_s: int
    correct_answers: int
    mistakes: int
    current_problem: Problem | None
    prompt: str
    feedback: Feedback | None
    last_result: RoundResult | None


class RoundController:
    def __init__(
        self,
        *,
        levels: LevelStore,
        clock: Clock,
        generator: ProblemGenerator,
        config: RoundConfig | None = None,
    ) -> None:
        self._levels = levels
        self._clock = clock
        self._generator = generator
        self._config = config if config is not None else RoundConfig()
        self._timer = PeriodicTimer(clock, interval_s=self._config.tick_interval_s)

        self._level = levels.load()
        self._phase = RoundPhase.IDLE
        self._current: Problem | None = None
        self._correct = 0
        self._mistakes = 0
        self._time_left_s = int(self._config.round_duration_s)
        self._feedback: Feedback | None = None
        self._last_result: RoundResult | None = None

    @property
    def level(self) -> int:
        return self._level

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def current_problem(self) -> Problem | None:
        return self._current

    @property
    def correct_answers(self) -> int:
        return self._correct

    @property
    def mistakes(self) -> int:
        return self._mistakes

    @property
    def time_left_s(self) -> int:
        return self._time_left_s

    @property
    def feedback(self) -> Feedback | None:
        return self._feedback

    @property
    def last_result(self) -> RoundResult | None:
        return self._last_result

    @property
    def timer_active(self) -> bool:
        return self._timer.active

    def requirement(self) -> LevelRequirement:
        return level_requirement(self._level)

    def start_round(self) -> None:
        if self._phase is RoundPhase.ACTIVE:
            return
        self._timer.cancel()
        self._time_left_s = int(self._config.round_duration_s)
        self._correct = 0
        self._mistakes = 0
        self._feedback = None
        self._current = self._generator.next_problem(level=self._level)
        self._phase = RoundPhase.ACTIVE
        self._timer.start()
        logger.info("Round started at level %d", self._level)

    def update(self) -> None:
        """Advance the countdown by however many intervals elapsed."""

        for _ in range(self._timer.poll()):
            if self._phase is not RoundPhase.ACTIVE:
                break
            self.tick()

    def tick(self) -> None:
        if self._phase is not RoundPhase.ACTIVE:
            return
        if self._time_left_s > 0:
            self._time_left_s -= 1
        if self._time_left_s == 0:
            self._end_round()

    def submit_answer(self, raw: str) -> Feedback | None:
        """Check a typed answer against the current problem.

        Returns the feedback to show, or None when no round is active.
        """

        if self._phase is not RoundPhase.ACTIVE:
            return None
        assert self._current is not None

        value = _try_parse_number(raw)
        if value is None:
            return self._emit(MSG_INVALID, None)

        if abs(value - self._current.answer) < self._config.answer_tolerance:
            self._correct += 1
            self._current = self._generator.next_problem(level=self._level)
            return self._emit(MSG_CORRECT, True)

        self._mistakes += 1
        return self._emit(MSG_WRONG, False)

    def clear_feedback(self) -> None:
        self._feedback = None

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            phase=self._phase,
            level=self._level,
            target_range=target_range(self._level),
            requirement=self.requirement(),
            time_left_s=self._time_left_s,
            correct_answers=self._correct,
            mistakes=self._mistakes,
            current_problem=self._current,
            prompt="" if self._current is None else self._current.prompt,
            feedback=self._feedback,
            last_result=self._last_result,
        )

    def _emit(self, message: str, is_correct: bool | None) -> Feedback:
        self._feedback = Feedback(
            message=message,
            is_correct=is_correct,
            clear_after_s=self._config.feedback_clear_s,
        )
        return self._feedback

    def _end_round(self) -> None:
        self._timer.cancel()
        self._phase = RoundPhase.COMPLETE

        previous = self._level
        outcome, new_level = evaluate_round(
            level=previous,
            correct=self._correct,
            mistakes=self._mistakes,
            fail_badly_below=self._config.fail_badly_below,
        )
        self._last_result = RoundResult(
            outcome=outcome,
            previous_level=previous,
            new_level=new_level,
            correct=self._correct,
            mistakes=self._mistakes,
            requirement=level_requirement(previous),
        )
        if new_level != previous:
            self._level = new_level
            self._levels.save(new_level)

        logger.info(
            "Round %s: %d correct, %d mistakes, level %d -> %d",
            outcome.value,
            self._correct,
            self._mistakes,
            previous,
            new_level,
        )


def _try_parse_number(text: str) -> float | None:
    s = text.strip()
    if not s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def build_round_controller(
    *,
    clock: Clock,
    store: KeyValueStore,
    seed: int | None = None,
    config: RoundConfig | None = None,
    generator_config: GeneratorConfig | None = None,
) -> RoundController:
    return RoundController(
        levels=LevelStore(store),
        clock=clock,
        generator=ProblemGenerator(seed=seed, config=generator_config),
        config=config,
    )
