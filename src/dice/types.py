"""Dice engine type definitions.

Immutable dataclasses for dice pools, counted successes and roll results,
plus the enums shared by the tallier and the reroll state machine.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum


DIE_FACES = (1, 2, 3, 4, 5, 6)
LOWEST_FACE = 1


class SuccessTier(IntEnum):
    """Tier of a counted success, ordered from worst to best.

    Ordering is meaningful: comparisons between tiers decide whether
    a reroll improved the result.
    """

    FAIL = 0
    BASIC = 1  # pair
    CRITICAL = 2  # three of a kind
    EXTREME = 3  # four of a kind
    IMPOSSIBLE = 4  # five of a kind
    JACKPOT = 5  # six or more of a kind

    @property
    def label(self) -> str:
        """Human-readable tier name."""
        return self.name.title()


class RerollKind(str, Enum):
    """Kind of reroll requested by the player."""

    NORMAL = "normal"  # paid; losing one success if it does not improve
    FREE = "free"  # granted; never costs a success


class RerollState(str, Enum):
    """Position of a roll chain in the reroll / all-in sequence.

    Transitions only move forward:
    INITIAL -> NORMAL_REROLL_USED | FREE_REROLL_USED -> ALL_IN_USED,
    and any state -> TERMINAL.
    """

    INITIAL = "initial"
    NORMAL_REROLL_USED = "normal_reroll_used"
    FREE_REROLL_USED = "free_reroll_used"
    ALL_IN_USED = "all_in_used"
    TERMINAL = "terminal"

    @property
    def is_reroll(self) -> bool:
        """True once the chain's single reroll slot has been spent."""
        return self in (RerollState.NORMAL_REROLL_USED, RerollState.FREE_REROLL_USED)


@dataclass(frozen=True)
class Success:
    """One counted success: a group of dice showing the same face.

    Attributes:
        face: The face value shared by the group.
        size: Number of dice in the group (always >= 2).
        tier: Tier derived from the group size.
    """

    face: int
    size: int
    tier: SuccessTier


@dataclass(frozen=True)
class LooseDie:
    """A die that is not part of any counted success.

    Attributes:
        index: Position of the die in the pool, used to reroll it.
        face: Current face value.
    """

    index: int
    face: int


@dataclass(frozen=True)
class PoolBreakdown:
    """How a pool size was assembled from its modifiers.

    Attributes:
        attribute: Base attribute value.
        skill: Base skill value.
        condition_penalty: Summed condition penalty (zero or negative).
        resource_bonus: Dice bought with a pre-roll resource spend.
        ad_hoc: Free-form adjustment, may be negative.
        raw: Unclamped sum of all contributions.
        size: Final number of dice to roll.
        clamped: True if size differs from raw.
    """

    attribute: int
    skill: int
    condition_penalty: int
    resource_bonus: int
    ad_hoc: int
    raw: int
    size: int
    clamped: bool = False

    @property
    def modifier(self) -> int:
        """Net modifier on top of attribute + skill."""
        return self.condition_penalty + self.resource_bonus + self.ad_hoc


@dataclass(frozen=True)
class RollResult:
    """Immutable snapshot of a tallied pool within a roll chain.

    Attributes:
        faces: Every die in the pool, in pool order.
        successes: Counted successes, one per same-face group of 2+.
        loose: Dice not part of any success, eligible for rerolling.
        forfeited: Groups whose success was removed by a reroll penalty
            or an all-in bust. Their dice stay in the pool.
        state: Where the chain stands after producing this result.
        improved: Verdict of the transition that produced this result
            (None for a fresh tally).
        lost_one_on_reroll: A normal reroll failed to improve and a
            success was forfeited.
        all_in_bust: An all-in failed to improve and every success
            was forfeited.
    """

    faces: tuple[int, ...]
    successes: tuple[Success, ...] = field(default_factory=tuple)
    loose: tuple[LooseDie, ...] = field(default_factory=tuple)
    forfeited: tuple[Success, ...] = field(default_factory=tuple)
    state: RerollState = RerollState.INITIAL
    improved: bool | None = None
    lost_one_on_reroll: bool = False
    all_in_bust: bool = False

    @property
    def pool_size(self) -> int:
        """Number of dice in the pool."""
        return len(self.faces)

    @property
    def frequencies(self) -> dict[int, int]:
        """Face value -> number of dice showing it, for every face 1-6."""
        counts = Counter(self.faces)
        return {face: counts.get(face, 0) for face in DIE_FACES}

    @property
    def counts(self) -> dict[SuccessTier, int]:
        """Number of successes per tier (FAIL excluded)."""
        tally = {tier: 0 for tier in SuccessTier if tier is not SuccessTier.FAIL}
        for success in self.successes:
            tally[success.tier] += 1
        return tally

    @property
    def total_successes(self) -> int:
        """Number of counted successes of any tier."""
        return len(self.successes)

    @property
    def has_success(self) -> bool:
        """True if at least one success is counted."""
        return bool(self.successes)

    @property
    def basic(self) -> int:
        return self.counts[SuccessTier.BASIC]

    @property
    def critical(self) -> int:
        return self.counts[SuccessTier.CRITICAL]

    @property
    def extreme(self) -> int:
        return self.counts[SuccessTier.EXTREME]

    @property
    def impossible(self) -> int:
        return self.counts[SuccessTier.IMPOSSIBLE]

    @property
    def jackpot(self) -> int:
        return self.counts[SuccessTier.JACKPOT]

    @property
    def tiers(self) -> tuple[SuccessTier, ...]:
        """Tiers of all successes, best first."""
        return tuple(sorted((s.tier for s in self.successes), reverse=True))

    @property
    def loose_indexes(self) -> tuple[int, ...]:
        """Pool positions of the loose dice."""
        return tuple(die.index for die in self.loose)

    def evolve(self, **changes) -> "RollResult":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
