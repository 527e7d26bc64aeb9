"""
Tests for question generation.
"""

import random
from dataclasses import replace
from fractions import Fraction

import pytest

from math_snake.snake_core.config_loader import load_config
from math_snake.snake_core.questions import (
    GENERIC_OFFSETS,
    AnswerValue,
    QuestionGenerationError,
    QuestionGenerator,
    clamp_tier,
    pick_distractors,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def generator(config):
    return QuestionGenerator(config, seed=42)


class TestQuestionShape:
    """Every tier yields one answer and two distinct distractors."""

    @pytest.mark.parametrize("tier", [0, 1, 2, 3])
    def test_two_distinct_distractors(self, generator, tier):
        for _ in range(200):
            q = generator.generate(tier)
            values = [option.value for option in q.options]
            assert len(q.distractors) == 2
            assert len(set(values)) == 3
            assert q.text.endswith("= ?")

    @pytest.mark.parametrize("tier", [0, 1, 2])
    def test_numeric_distractors_near_answer(self, generator, config, tier):
        offset_max = config.questions.distractor_offset_max
        for _ in range(200):
            q = generator.generate(tier)
            for d in q.distractors:
                assert not d.is_fraction
                assert 1 <= abs(d.value - q.answer.value) <= offset_max

    def test_options_put_answer_first(self, generator):
        q = generator.generate(0)
        assert q.options[0] == q.answer
        assert q.options[1:] == q.distractors


class TestTierContent:
    """Check per-tier arithmetic."""

    def test_tier0_answers_non_negative(self, generator):
        for _ in range(300):
            q = generator.generate(0)
            assert 0 <= q.answer.value <= 18
            assert ("+" in q.text) or ("-" in q.text)

    def test_tier0_answer_matches_text(self, generator):
        for _ in range(100):
            q = generator.generate(0)
            a, op, b = q.text.split()[:3]
            expected = int(a) + int(b) if op == "+" else int(a) - int(b)
            assert q.answer.value == expected

    def test_tier1_evaluates_left_to_right(self, generator):
        for _ in range(300):
            q = generator.generate(1)
            tokens = q.text.split()[:-2]
            if len(tokens) == 3:
                a, op, b = tokens
                assert op == "×"
                assert q.answer.value == int(a) * int(b)
            else:
                a, op1, b, op2, c = tokens
                value = int(a) + int(b) if op1 == "+" else int(a) - int(b)
                value = value + int(c) if op2 == "+" else value - int(c)
                assert q.answer.value == value

    def test_tier2_answers_negative(self, generator):
        for _ in range(300):
            q = generator.generate(2)
            assert q.answer.value < 0

    def test_tier3_answers_are_fractions(self, generator):
        seen = set()
        for _ in range(300):
            q = generator.generate(3)
            assert q.answer.is_fraction
            assert q.answer.value in {Fraction(1, 2), Fraction(3, 4), Fraction(1)}
            for d in q.distractors:
                assert d.is_fraction
                assert d.value != q.answer.value
            seen.add(q.answer.value)
        assert len(seen) == 3

    def test_fraction_display_is_simplified(self):
        assert AnswerValue.fraction(2, 4).display == "1/2"
        assert AnswerValue.fraction(4, 4).display == "1"
        assert AnswerValue.fraction(3, 4).display == "3/4"
        assert float(AnswerValue.fraction(3, 4)) == 0.75


class TestTierClamp:
    """Out-of-range tiers never fail."""

    def test_clamp_values(self):
        assert clamp_tier(0) == 0
        assert clamp_tier(3) == 3
        assert clamp_tier(7) == 3
        assert clamp_tier(-1) == 0
        assert clamp_tier(1.5) == 0
        assert clamp_tier(None) == 0
        assert clamp_tier(True) == 0

    def test_high_tier_uses_fraction_variant(self, generator):
        q = generator.generate(99)
        assert q.tier == 3
        assert q.answer.is_fraction

    def test_negative_tier_uses_first_variant(self, generator):
        q = generator.generate(-5)
        assert q.tier == 0


class TestDeterminism:
    """Seeded generators replay the same questions."""

    def test_same_seed_same_sequence(self, config):
        g1 = QuestionGenerator(config, seed=7)
        g2 = QuestionGenerator(config, seed=7)
        tiers = [0, 1, 2, 3] * 10
        assert [g1.generate(t) for t in tiers] == [g2.generate(t) for t in tiers]

    def test_reset_replays(self, config):
        g = QuestionGenerator(config, seed=7)
        first = [g.generate(1) for _ in range(10)]
        g.reset(7)
        assert [g.generate(1) for _ in range(10)] == first


class TestPickDistractors:
    """Direct checks on distractor sampling."""

    def test_generic_offsets(self):
        rng = random.Random(1)
        for answer in range(-10, 10):
            d1, d2 = pick_distractors(answer, rng, offsets=GENERIC_OFFSETS)
            assert d1 != d2
            assert answer not in (d1, d2)
            assert abs(d1 - answer) <= 3 and abs(d2 - answer) <= 3

    def test_range_too_small_raises(self):
        rng = random.Random(1)
        with pytest.raises(QuestionGenerationError):
            pick_distractors(5, rng, offsets=(0, 1))
        with pytest.raises(QuestionGenerationError):
            pick_distractors(5, rng, offset_max=0)

    def test_offset_max_one_is_enough(self):
        rng = random.Random(3)
        assert sorted(pick_distractors(5, rng, offset_max=1)) == [4, 6]

    def test_generator_uses_generic_offsets_without_bound(self, config):
        cfg = replace(config, questions=replace(config.questions, distractor_offset_max=None))
        generator = QuestionGenerator(cfg, seed=5)
        spreads = set()
        for _ in range(200):
            q = generator.generate(2)
            for d in q.distractors:
                spread = d.value - q.answer.value
                assert spread != 0 and -3 <= spread <= 3
                spreads.add(spread)
        assert spreads == {-3, -2, -1, 1, 2, 3}
