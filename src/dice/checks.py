"""Difficulty checks and outcome labels.

A roll passes a difficulty when it holds a success at or above that
tier. Trading three lesser successes for one greater is a Director's
call, so it is only applied when asked for (``three_for_one=True``):
3 Basic count as 1 Critical and 3 Critical as 1 Extreme. Impossible
can only come from five or more matching dice.
"""

from enum import Enum

from src.dice.types import RollResult, SuccessTier


class Difficulty(str, Enum):
    """Difficulty a roll must meet."""

    BASIC = "basic"
    CRITICAL = "critical"
    EXTREME = "extreme"
    IMPOSSIBLE = "impossible"

    @property
    def tier(self) -> SuccessTier:
        """Lowest success tier that meets this difficulty."""
        return SuccessTier[self.name]


PROMOTION_RATE = 3


def highest_tier(result: RollResult) -> SuccessTier:
    """Best tier among a result's successes, FAIL when there are none."""
    return max((s.tier for s in result.successes), default=SuccessTier.FAIL)


def promoted_counts(result: RollResult) -> dict[SuccessTier, int]:
    """Success counts after trading three lesser successes for one greater.

    Examples:
        >>> from src.dice.tally import tally
        >>> promoted_counts(tally([1, 1, 2, 2, 3, 3]))[SuccessTier.CRITICAL]
        1
    """
    counts = dict(result.counts)
    for lower, upper in (
        (SuccessTier.BASIC, SuccessTier.CRITICAL),
        (SuccessTier.CRITICAL, SuccessTier.EXTREME),
    ):
        promoted, counts[lower] = divmod(counts[lower], PROMOTION_RATE)
        counts[upper] += promoted
    return counts


def passes_difficulty(
    result: RollResult,
    difficulty: Difficulty | str,
    three_for_one: bool = False,
) -> bool:
    """Check whether a result meets a difficulty.

    Args:
        result: The roll result to judge.
        difficulty: Difficulty to meet.
        three_for_one: Count three lesser successes as one greater.

    Returns:
        True if the result holds a success of the required tier or better.

    Examples:
        >>> from src.dice.tally import tally
        >>> passes_difficulty(tally([5, 5, 5, 2]), "critical")
        True
        >>> passes_difficulty(tally([5, 5, 2, 3]), "critical")
        False
    """
    needed = Difficulty(difficulty).tier
    counts = promoted_counts(result) if three_for_one else result.counts
    return any(count > 0 for tier, count in counts.items() if tier >= needed)


def outcome_label(result: RollResult) -> str:
    """One-word outcome: the best tier reached, or "Fail"."""
    return highest_tier(result).label
