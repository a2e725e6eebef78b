"""Tests for difficulty checks."""

import pytest

from src.dice.checks import (
    Difficulty,
    highest_tier,
    outcome_label,
    passes_difficulty,
    promoted_counts,
)
from src.dice.tally import tally
from src.dice.types import SuccessTier


class TestHighestTier:
    """Tests for highest_tier and outcome_label."""

    def test_best_tier(self):
        assert highest_tier(tally([2, 2, 5, 5, 5, 1])) == SuccessTier.CRITICAL

    def test_no_success(self):
        result = tally([1, 2, 3])
        assert highest_tier(result) == SuccessTier.FAIL
        assert outcome_label(result) == "Fail"

    def test_label(self):
        assert outcome_label(tally([6, 6, 6, 6, 6, 6])) == "Jackpot"


class TestPassesDifficulty:
    """Tests for passes_difficulty."""

    @pytest.mark.parametrize(
        "pool,difficulty,expected",
        [
            ([2, 2, 3], Difficulty.BASIC, True),
            ([2, 2, 3], Difficulty.CRITICAL, False),
            ([5, 5, 5, 2], "critical", True),
            ([5, 5, 5, 5], Difficulty.CRITICAL, True),
            ([1, 2, 3, 4], Difficulty.BASIC, False),
            ([4, 4, 4, 4, 4], Difficulty.IMPOSSIBLE, True),
            ([6, 6, 6, 6, 6, 6], Difficulty.IMPOSSIBLE, True),
        ],
    )
    def test_tier_meets_difficulty(self, pool, difficulty, expected):
        assert passes_difficulty(tally(pool), difficulty) is expected

    def test_three_basics_off_by_default(self):
        result = tally([1, 1, 2, 2, 3, 3])
        assert not passes_difficulty(result, Difficulty.CRITICAL)

    def test_three_basics_make_a_critical(self):
        result = tally([1, 1, 2, 2, 3, 3])
        assert passes_difficulty(result, Difficulty.CRITICAL, three_for_one=True)
        assert not passes_difficulty(result, Difficulty.EXTREME, three_for_one=True)

    def test_unknown_difficulty_raises(self):
        with pytest.raises(ValueError):
            passes_difficulty(tally([2, 2]), "legendary")


class TestPromotedCounts:
    """Tests for promoted_counts."""

    def test_chained_promotion(self):
        """Promoted Criticals can promote again into an Extreme."""
        result = tally([1, 1, 2, 2, 3, 3, 4, 4, 4, 5, 5, 5])
        counts = promoted_counts(result)
        assert counts[SuccessTier.BASIC] == 0
        assert counts[SuccessTier.CRITICAL] == 0
        assert counts[SuccessTier.EXTREME] == 1

    def test_remainder_kept(self):
        counts = promoted_counts(tally([1, 1, 2, 2]))
        assert counts[SuccessTier.BASIC] == 2
        assert counts[SuccessTier.CRITICAL] == 0

    def test_impossible_never_promoted_into(self):
        counts = promoted_counts(tally([1, 1, 1, 2, 2, 2, 3, 3, 3]))
        assert counts[SuccessTier.EXTREME] == 1
        assert counts[SuccessTier.IMPOSSIBLE] == 0
