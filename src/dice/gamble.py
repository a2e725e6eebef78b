"""Gamble surcharge.

On a roll tagged as a Gamble, every die showing a 1 in the final pool
costs the hero one Grit, whether or not that die is part of a success.
The engine only reports the count; applying it is the caller's job.
"""

from src.dice.types import LOWEST_FACE, RollResult


def gamble_surcharge(final: RollResult, is_gamble: bool) -> int:
    """Count the resource cost of a Gamble.

    Call once per roll chain, with the result the player kept.

    Args:
        final: The final result of the chain.
        is_gamble: Whether the roll was tagged as a Gamble.

    Returns:
        Number of dice showing 1 in the final pool, or 0 if not a Gamble.

    Examples:
        >>> from src.dice.tally import tally
        >>> gamble_surcharge(tally([1, 1, 4, 4, 6]), is_gamble=True)
        2
        >>> gamble_surcharge(tally([1, 1, 4, 4, 6]), is_gamble=False)
        0
    """
    if not is_gamble:
        return 0
    return final.frequencies[LOWEST_FACE]
