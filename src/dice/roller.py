"""Pool roller.

Produces uniformly random d6 faces for a pool, and rerolls selected
positions of an existing pool. The random source is injectable: pass any
object with a ``randint(a, b)`` method (e.g. ``random.Random(seed)``);
the module-level ``random`` is used otherwise.
"""

import logging
import random
from collections.abc import Iterable
from typing import Protocol

from src.dice.errors import InvalidPoolSize
from src.dice.types import DIE_FACES


logger = logging.getLogger(__name__)

DIE_SIZE = len(DIE_FACES)


class RandomSource(Protocol):
    """Anything that can pick an integer in a closed range."""

    def randint(self, a: int, b: int) -> int: ...


def roll_die(rng: RandomSource | None = None) -> int:
    """Roll a single d6."""
    source = rng or random
    return source.randint(1, DIE_SIZE)


def roll_pool(n: int, rng: RandomSource | None = None) -> tuple[int, ...]:
    """Roll a pool of ``n`` independent d6.

    Args:
        n: Number of dice to roll.
        rng: Optional random source.

    Returns:
        Tuple of ``n`` faces, each in 1..6.

    Raises:
        InvalidPoolSize: If ``n`` is not a positive integer.

    Examples:
        >>> len(roll_pool(5))
        5
    """
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise InvalidPoolSize(f"Pool size must be a positive integer, got {n!r}")

    faces = tuple(roll_die(rng) for _ in range(n))
    logger.debug("Rolled %dd6: %s", n, faces)
    return faces


def reroll_faces(
    faces: tuple[int, ...],
    indexes: Iterable[int],
    rng: RandomSource | None = None,
) -> tuple[int, ...]:
    """Reroll only the dice at the given positions.

    Positions not listed keep their face. Positions are rerolled in
    ascending order so a scripted random source is consumed predictably.

    Args:
        faces: Current pool.
        indexes: Positions to reroll.
        rng: Optional random source.

    Returns:
        New pool of the same size.

    Raises:
        IndexError: If a position is outside the pool.
    """
    targets = sorted(set(indexes))
    if not targets:
        return tuple(faces)

    for index in targets:
        if not 0 <= index < len(faces):
            raise IndexError(f"Die position {index} outside pool of {len(faces)}")

    new_values = roll_pool(len(targets), rng)
    updated = list(faces)
    for index, value in zip(targets, new_values):
        updated[index] = value

    logger.debug("Rerolled positions %s: %s -> %s", targets, faces, tuple(updated))
    return tuple(updated)
