"""Random arithmetic problem generation scaled by level.

Every problem has two positive operands and a positive integer answer that
never exceeds the level's target range (``5 * level``).  Operands are drawn
per operator and rejected until the result fits; the number of redraws is
capped, after which a fixed fallback problem for the chosen operator is
returned so that generation always terminates.

The generator owns its own ``random.Random`` instance so that a seed fully
determines the stream of problems for a given sequence of levels.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS: dict[Operation, str] = {
    Operation.ADD: "+",
    Operation.SUBTRACT: "-",
    Operation.MULTIPLY: "×",
    Operation.DIVIDE: "÷",
}

TARGET_RANGE_PER_LEVEL = 5


@dataclass(frozen=True, slots=True)
class Problem:
    num1: int
    num2: int
    operation: Operation
    answer: int

    @property
    def prompt(self) -> str:
        return f"{self.num1} {self.operation.symbol} {self.num2} = ?"


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    max_draws: int = 1000

    def __post_init__(self) -> None:
        if self.max_draws < 1:
            raise ValueError("max_draws must be >= 1")


# Used when every draw for an operator was rejected; valid for any level >= 1.
_FALLBACKS: dict[Operation, Problem] = {
    Operation.ADD: Problem(1, 1, Operation.ADD, 2),
    Operation.SUBTRACT: Problem(2, 1, Operation.SUBTRACT, 1),
    Operation.MULTIPLY: Problem(1, 1, Operation.MULTIPLY, 1),
    Operation.DIVIDE: Problem(2, 2, Operation.DIVIDE, 1),
}


def target_range(level: int) -> int:
    """Upper bound (inclusive) on a problem's answer at ``level``."""

    if level < 1:
        raise ValueError("level must be >= 1")
    return TARGET_RANGE_PER_LEVEL * int(level)


def is_valid(problem: Problem, *, level: int) -> bool:
    return (
        problem.num1 > 0
        and problem.num2 > 0
        and 0 < problem.answer <= target_range(level)
    )


class ProblemGenerator:
    """Generates a reproducible sequence of arithmetic problems.

    The operator is chosen uniformly once per call and kept for all redraws.
    """

    def __init__(self, *, seed: int | None = None, config: GeneratorConfig | None = None) -> None:
        self._rng = random.Random(seed)
        self._config = config if config is not None else GeneratorConfig()
        self._operations = list(Operation)

    def next_problem(self, *, level: int) -> Problem:
        limit = target_range(level)
        op = self._rng.choice(self._operations)

        for _ in range(self._config.max_draws):
            num1, num2, answer = self._draw(op, limit)
            if answer > limit or answer < 0 or num1 == 0 or num2 == 0:
                continue
            return Problem(num1=num1, num2=num2, operation=op, answer=answer)

        logger.warning(
            "No valid %s problem after %d draws at level %d; using fallback",
            op.value,
            self._config.max_draws,
            level,
        )
        return _FALLBACKS[op]

    def _draw(self, op: Operation, limit: int) -> tuple[int, int, int]:
        rng = self._rng
        if op is Operation.ADD:
            num1 = rng.randint(0, limit // 2)
            num2 = rng.randint(0, limit - num1)
            return num1, num2, num1 + num2

        if op is Operation.SUBTRACT:
            # Built backwards from the answer so the result is never negative.
            answer = rng.randint(0, limit)
            num2 = rng.randint(0, answer)
            return answer + num2, num2, answer

        if op is Operation.MULTIPLY:
            if limit <= 10:
                num1 = rng.randint(1, 5)
                num2 = rng.randint(1, 5)
            else:
                max_factor = math.isqrt(limit)
                num1 = rng.randint(1, max_factor)
                num2 = rng.randint(1, limit // num1)
            return num1, num2, num1 * num2

        # DIVIDE: dividend is built from the quotient, so there is never a remainder.
        num2 = rng.randint(2, 9)
        answer = rng.randint(1, max(1, limit // num2))
        return answer * num2, num2, answer


def generate(level: int, *, rng_seed: int | None = None) -> Problem:
    """One-shot convenience wrapper around :class:`ProblemGenerator`."""

    return ProblemGenerator(seed=rng_seed).next_problem(level=level)
