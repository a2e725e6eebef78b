"""Success tallier.

Groups a pool by face value and turns every group of two or more
matching dice into exactly one success. This is the only place tiers
are assigned; the initial roll, the reroll and the all-in all go
through ``tally``.
"""

from collections import Counter
from collections.abc import Iterable

from src.dice.errors import InvalidPoolSize
from src.dice.types import (
    DIE_FACES,
    LooseDie,
    RerollState,
    RollResult,
    Success,
    SuccessTier,
)


# Group size -> tier. Anything above the largest key is a Jackpot.
GROUP_TIERS = {
    2: SuccessTier.BASIC,
    3: SuccessTier.CRITICAL,
    4: SuccessTier.EXTREME,
    5: SuccessTier.IMPOSSIBLE,
}
JACKPOT_SIZE = 6


def classify_group(size: int) -> SuccessTier:
    """Get the tier produced by a group of matching dice.

    Args:
        size: Number of dice showing the same face.

    Returns:
        The tier; FAIL for a single die (or none).

    Examples:
        >>> classify_group(2)
        <SuccessTier.BASIC: 1>
        >>> classify_group(7)
        <SuccessTier.JACKPOT: 5>
    """
    if size >= JACKPOT_SIZE:
        return SuccessTier.JACKPOT
    return GROUP_TIERS.get(size, SuccessTier.FAIL)


def tally(pool: Iterable[int], state: RerollState = RerollState.INITIAL) -> RollResult:
    """Tally a pool into successes and loose dice.

    A group of four yields one Extreme success, not a Basic plus a
    Critical: each die belongs to at most one success. Two separate
    pairs yield two Basic successes.

    Args:
        pool: Face values, in pool order.
        state: Chain state to stamp on the result.

    Returns:
        RollResult with successes ordered best tier first (ties by face),
        and loose dice in pool order.

    Raises:
        InvalidPoolSize: If the pool is empty.
        ValueError: If a value is not a d6 face.

    Examples:
        >>> result = tally([2, 2, 5, 5, 5, 1])
        >>> [s.tier.label for s in result.successes]
        ['Critical', 'Basic']
        >>> result.loose_indexes
        (5,)
    """
    faces = tuple(pool)
    if not faces:
        raise InvalidPoolSize("Cannot tally an empty pool")

    for value in faces:
        if isinstance(value, bool) or value not in DIE_FACES:
            raise ValueError(f"Die value must be 1-6, got {value!r}")

    counts = Counter(faces)

    successes = [
        Success(face=face, size=size, tier=classify_group(size))
        for face, size in counts.items()
        if size >= 2
    ]
    successes.sort(key=lambda s: (s.tier, s.face), reverse=True)

    loose = tuple(
        LooseDie(index=index, face=face)
        for index, face in enumerate(faces)
        if counts[face] == 1
    )

    return RollResult(
        faces=faces,
        successes=tuple(successes),
        loose=loose,
        state=state,
    )
