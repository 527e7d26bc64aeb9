"""
Question Generator
==================

Generates arithmetic questions with one correct answer and two distractors
for each difficulty tier:

- Tier 0 (BRONZE): single-digit addition / non-negative subtraction
- Tier 1 (SILVER): mixed +, -, x with a second term, evaluated left to right
- Tier 2 (GOLD): subtraction with a negative result
- Tier 3 (DIAMOND): fractions over 2 or 4
"""

from __future__ import annotations

import numbers
import random
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Dict, Optional, Sequence, Tuple, Union

from math_snake.snake_core.config_loader import GameConfig, get_config

# Number of question variants; higher tiers reuse the last one
MAX_QUESTION_TIER = 3

# Offsets used when questions.distractor_offset_max is null
GENERIC_OFFSETS: Tuple[int, ...] = tuple(range(-3, 4))


class QuestionGenerationError(RuntimeError):
    """Raised when a distractor offset range cannot yield enough distinct values."""


class ValueKind(Enum):
    NUMERIC = "numeric"
    FRACTION = "fraction"


@dataclass(frozen=True)
class AnswerValue:
    """
    An answer shown on the board.

    Numeric values carry an int, fraction values carry an exact Fraction.
    Comparisons between answers always go through `value`; `display` is what
    the player reads.
    """
    kind: ValueKind
    display: str
    value: Union[int, Fraction]

    @classmethod
    def numeric(cls, value: int) -> "AnswerValue":
        return cls(ValueKind.NUMERIC, str(value), int(value))

    @classmethod
    def fraction(cls, numerator: int, denominator: int) -> "AnswerValue":
        """Build a simplified fraction ("2/4" shows as "1/2", "4/4" as "1")."""
        exact = Fraction(numerator, denominator)
        if exact.denominator == 1:
            display = str(exact.numerator)
        else:
            display = f"{exact.numerator}/{exact.denominator}"
        return cls(ValueKind.FRACTION, display, exact)

    @property
    def is_fraction(self) -> bool:
        return self.kind is ValueKind.FRACTION

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        return self.display


@dataclass(frozen=True)
class Question:
    """A generated question. Never mutated; replaced wholesale each round."""
    text: str
    answer: AnswerValue
    distractors: Tuple[AnswerValue, AnswerValue]
    tier: int

    @property
    def options(self) -> Tuple[AnswerValue, ...]:
        """Correct answer followed by the distractors."""
        return (self.answer,) + tuple(self.distractors)


# Fixed distractors for the fraction tier, keyed by the exact answer
FRACTION_DISTRACTORS: Dict[Fraction, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    Fraction(1): ((1, 2), (3, 4)),
    Fraction(1, 2): ((1, 4), (3, 4)),
    Fraction(1, 4): ((1, 2), (3, 4)),
    Fraction(3, 4): ((1, 2), (1, 1)),
}


def clamp_tier(tier) -> int:
    """
    Normalize a tier index for question generation.

    Values above the last variant use the last variant. Negative, boolean or
    non-integer values fall back to tier 0.
    """
    if isinstance(tier, bool) or not isinstance(tier, numbers.Integral) or tier < 0:
        return 0
    return min(int(tier), MAX_QUESTION_TIER)


def pick_distractors(
    answer: int,
    rng: random.Random,
    offsets: Optional[Sequence[int]] = None,
    offset_max: int = 4,
    count: int = 2
) -> Tuple[int, ...]:
    """
    Draw `count` unique integer distractors near `answer`.

    Each candidate is `answer + offset`. With `offsets` None the offset is a
    magnitude in [1, offset_max] with a random sign; otherwise it is drawn
    uniformly from `offsets`. Candidates equal to the answer or to an earlier
    distractor are rejected and redrawn.

    Raises:
        QuestionGenerationError: If the offset range holds fewer than `count`
            distinct non-zero offsets, so sampling could never finish.
    """
    if offsets is None:
        usable = 2 * max(0, offset_max)
    else:
        usable = len({o for o in offsets if o != 0})
    if usable < count:
        raise QuestionGenerationError(
            f"Offset range yields {usable} distinct distractors, need {count}"
        )

    distractors = []
    while len(distractors) < count:
        if offsets is None:
            offset = rng.randint(1, offset_max) * rng.choice((-1, 1))
        else:
            offset = rng.choice(offsets)
        candidate = answer + offset
        if candidate != answer and candidate not in distractors:
            distractors.append(candidate)
    return tuple(distractors)


class QuestionGenerator:
    """
    Stochastic question source.

    Holds no game state beyond its RNG, so the same seed replays the same
    question sequence for the same tier sequence.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize question generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._addition_probability = config.questions.addition_probability
        self._offset_max = config.questions.distractor_offset_max

    def reset(self, seed: Optional[int] = None) -> None:
        """Reseed the generator. Keeps the current RNG if seed is None."""
        if seed is not None:
            self._rng = random.Random(seed)

    def generate(self, tier: int) -> Question:
        """
        Generate a question for a tier.

        Args:
            tier: Difficulty tier, normalized with clamp_tier().

        Returns:
            A new Question with exactly two distractors.
        """
        tier = clamp_tier(tier)
        if tier == 0:
            return self._elementary()
        if tier == 1:
            return self._mixed()
        if tier == 2:
            return self._signed()
        return self._fractions()

    def _numeric_question(self, text: str, answer: int, tier: int) -> Question:
        if self._offset_max is None:
            distractors = pick_distractors(answer, self._rng, offsets=GENERIC_OFFSETS)
        else:
            distractors = pick_distractors(answer, self._rng, offset_max=self._offset_max)
        return Question(
            text=text,
            answer=AnswerValue.numeric(answer),
            distractors=tuple(AnswerValue.numeric(d) for d in distractors),
            tier=tier
        )

    def _elementary(self) -> Question:
        a = self._rng.randint(1, 9)
        b = self._rng.randint(1, 9)

        if self._rng.random() < self._addition_probability:
            return self._numeric_question(f"{a} + {b} = ?", a + b, 0)

        # Larger operand first keeps the answer non-negative
        high, low = max(a, b), min(a, b)
        return self._numeric_question(f"{high} - {low} = ?", high - low, 0)

    def _mixed(self) -> Question:
        op1 = self._rng.choice(("+", "-", "×"))
        a = self._rng.randint(2, 9)
        b = self._rng.randint(2, 9)

        if op1 == "×":
            return self._numeric_question(f"{a} × {b} = ?", a * b, 1)

        c = self._rng.randint(1, 9)
        op2 = self._rng.choice(("+", "-"))

        # Strictly left to right: (a op1 b) op2 c
        answer = a + b if op1 == "+" else a - b
        answer = answer + c if op2 == "+" else answer - c
        return self._numeric_question(f"{a} {op1} {b} {op2} {c} = ?", answer, 1)

    def _signed(self) -> Question:
        a = self._rng.randint(1, 10)
        b = self._rng.randint(11, 20)
        return self._numeric_question(f"{a} - {b} = ?", a - b, 2)

    def _fractions(self) -> Question:
        denominator = self._rng.choice((2, 4))
        if denominator == 2:
            num1, num2 = 1, 1
        else:
            num1 = self._rng.randint(1, 3)
            num2 = self._rng.randint(1, 3)
            if num1 + num2 > 4:
                num2 = 1

        answer = AnswerValue.fraction(num1 + num2, denominator)
        first, second = FRACTION_DISTRACTORS[answer.value]
        return Question(
            text=f"{num1}/{denominator} + {num2}/{denominator} = ?",
            answer=answer,
            distractors=(AnswerValue.fraction(*first), AnswerValue.fraction(*second)),
            tier=3
        )
