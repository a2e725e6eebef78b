"""Reroll / All-In state machine.

A roll chain is: roll -> optional reroll (normal or free) -> optional
all-in. Each step rerolls only loose dice, re-tallies the whole pool and
compares the candidate with what it would replace:

- Normal reroll: needs at least one success. If it does not improve,
  the prior result is kept minus one success chosen by the player.
- Free reroll: allowed with no successes. If it does not improve, the
  prior result is kept unchanged.
- All-in: only after a reroll that improved. If it does not improve,
  every success is lost.

The functional API (``reroll``, ``all_in``, ``finish``) works on
immutable RollResults; ``RollChain`` wraps it for callers that want to
keep history.
"""

import logging
from collections.abc import Iterable

from src.dice.errors import InvalidTransition
from src.dice.roller import RandomSource, reroll_faces, roll_pool
from src.dice.tally import tally
from src.dice.types import RerollKind, RerollState, RollResult, Success, SuccessTier


logger = logging.getLogger(__name__)


REROLL_STATES = {
    RerollKind.NORMAL: RerollState.NORMAL_REROLL_USED,
    RerollKind.FREE: RerollState.FREE_REROLL_USED,
}


def is_better(candidate: RollResult, prior: RollResult) -> bool:
    """Check whether a candidate result improves on a prior one.

    Better means strictly more successes, or at least one success at a
    strictly higher tier when both are compared tier-for-tier, best
    first. A tier that did not exist before counts as an upgrade.

    Args:
        candidate: The freshly tallied result.
        prior: The result it would replace.

    Returns:
        True if the candidate is better.

    Examples:
        >>> from src.dice.tally import tally
        >>> is_better(tally([4, 4, 4, 1]), tally([4, 4, 2, 1]))
        True
        >>> is_better(tally([4, 4, 3, 1]), tally([4, 4, 2, 1]))
        False
    """
    if candidate.total_successes > prior.total_successes:
        return True
    return any(new > old for new, old in zip(candidate.tiers, prior.tiers))


def forfeit_one(result: RollResult, tier: SuccessTier | None = None) -> RollResult:
    """Remove exactly one success from a result.

    Args:
        result: Result holding at least one success.
        tier: Tier of the success to give up. Defaults to the lowest
            tier present; among equal tiers the lowest face goes first.

    Returns:
        Copy of the result with one success moved to ``forfeited``.

    Raises:
        InvalidTransition: If there is no success of the requested tier.
    """
    chosen = _pick_forfeit(result, tier)
    remaining = list(result.successes)
    remaining.remove(chosen)
    return result.evolve(
        successes=tuple(remaining),
        forfeited=result.forfeited + (chosen,),
    )


def _pick_forfeit(result: RollResult, tier: SuccessTier | None) -> Success:
    candidates = [
        s for s in result.successes if tier is None or s.tier == tier
    ]
    if not candidates:
        wanted = "any" if tier is None else tier.label
        raise InvalidTransition(f"No {wanted} success to forfeit")
    return min(candidates, key=lambda s: (s.tier, s.face))


def _check_reroll_allowed(prior: RollResult, kind: RerollKind) -> None:
    if prior.state == RerollState.TERMINAL:
        raise InvalidTransition("Roll chain already finished")
    if prior.state != RerollState.INITIAL:
        raise InvalidTransition(
            f"Only one reroll per roll chain (state: {prior.state.value})"
        )
    if kind == RerollKind.NORMAL and not prior.has_success:
        raise InvalidTransition("A normal reroll needs at least one success")


def _resolve_indexes(prior: RollResult, indexes: Iterable[int] | None) -> tuple[int, ...]:
    loose = prior.loose_indexes
    if indexes is None:
        return loose

    chosen = tuple(sorted(set(indexes)))
    not_loose = [i for i in chosen if i not in loose]
    if not_loose:
        raise InvalidTransition(
            f"Only loose dice can be rerolled; positions {not_loose} are not loose"
        )
    return chosen


def reroll(
    prior: RollResult,
    kind: RerollKind,
    *,
    indexes: Iterable[int] | None = None,
    forfeit: SuccessTier | None = None,
    rng: RandomSource | None = None,
) -> RollResult:
    """Reroll loose dice once and resolve the outcome.

    Args:
        prior: The initial result of the chain.
        kind: Normal (paid) or free reroll.
        indexes: Loose dice to reroll; defaults to every loose die.
        forfeit: Tier of the success to give up if a normal reroll does
            not improve. Defaults to the lowest tier.
        rng: Optional random source.

    Returns:
        The accepted result, in NORMAL_REROLL_USED or FREE_REROLL_USED.

    Raises:
        InvalidTransition: If the chain already used its reroll or is
            finished, if a normal reroll has no success to risk, if a
            position is not a loose die, or if ``forfeit`` names a tier
            the prior result does not hold.
    """
    kind = RerollKind(kind)
    _check_reroll_allowed(prior, kind)
    targets = _resolve_indexes(prior, indexes)
    if kind == RerollKind.NORMAL and forfeit is not None:
        # Validate the penalty choice before any dice move
        _pick_forfeit(prior, forfeit)

    new_state = REROLL_STATES[kind]
    candidate = tally(reroll_faces(prior.faces, targets, rng), state=new_state)

    if is_better(candidate, prior):
        logger.debug("%s reroll improved: %s -> %s", kind.value, prior.tiers, candidate.tiers)
        return candidate.evolve(improved=True)

    if kind == RerollKind.FREE:
        logger.debug("Free reroll did not improve; keeping %s", prior.tiers)
        return prior.evolve(state=new_state, improved=False)

    kept = forfeit_one(prior, forfeit)
    logger.debug(
        "Normal reroll did not improve; forfeited %s",
        kept.forfeited[-1].tier.label,
    )
    return kept.evolve(state=new_state, improved=False, lost_one_on_reroll=True)


def all_in(prior: RollResult, *, rng: RandomSource | None = None) -> RollResult:
    """Go All In: reroll every loose die one final time.

    Args:
        prior: Result of a reroll that improved.
        rng: Optional random source.

    Returns:
        The improved result, or a bust with no successes left.

    Raises:
        InvalidTransition: If the chain is finished, already went all in,
            or its reroll did not improve.
    """
    if prior.state == RerollState.TERMINAL:
        raise InvalidTransition("Roll chain already finished")
    if prior.state == RerollState.ALL_IN_USED:
        raise InvalidTransition("All In can only be used once per roll chain")
    if not prior.state.is_reroll or prior.improved is not True:
        raise InvalidTransition("All In requires a reroll that improved the result")

    if not prior.loose:
        logger.warning("All In with no loose dice cannot improve; this is a bust")

    candidate = tally(
        reroll_faces(prior.faces, prior.loose_indexes, rng),
        state=RerollState.ALL_IN_USED,
    )

    if is_better(candidate, prior):
        logger.debug("All In improved: %s -> %s", prior.tiers, candidate.tiers)
        return candidate.evolve(improved=True)

    logger.debug("All In bust: lost %s", candidate.tiers)
    return candidate.evolve(
        successes=(),
        forfeited=candidate.successes,
        improved=False,
        all_in_bust=True,
    )


def finish(result: RollResult) -> RollResult:
    """Close a roll chain; the given result becomes final."""
    if result.state == RerollState.TERMINAL:
        return result
    return result.evolve(state=RerollState.TERMINAL)


class RollChain:
    """Stateful wrapper around one player's roll chain.

    Keeps the accepted result after every step, so a caller can show the
    whole sequence.

    Example:
        >>> chain = RollChain.start(6)
        >>> if chain.can_reroll(RerollKind.NORMAL):
        ...     chain.reroll(RerollKind.NORMAL)
        >>> final = chain.finish()
    """

    def __init__(self, initial: RollResult, rng: RandomSource | None = None):
        self.rng = rng
        self.history: list[RollResult] = [initial]

    @classmethod
    def start(cls, pool_size: int, rng: RandomSource | None = None) -> "RollChain":
        """Roll a fresh pool and open a chain on it."""
        return cls(tally(roll_pool(pool_size, rng)), rng=rng)

    @property
    def current(self) -> RollResult:
        """The last accepted result."""
        return self.history[-1]

    @property
    def state(self) -> RerollState:
        return self.current.state

    @property
    def is_finished(self) -> bool:
        return self.state == RerollState.TERMINAL

    def can_reroll(self, kind: RerollKind) -> bool:
        """Check whether a reroll of this kind is currently allowed."""
        if self.state != RerollState.INITIAL:
            return False
        return RerollKind(kind) == RerollKind.FREE or self.current.has_success

    @property
    def can_all_in(self) -> bool:
        return self.state.is_reroll and self.current.improved is True

    def reroll(
        self,
        kind: RerollKind,
        *,
        indexes: Iterable[int] | None = None,
        forfeit: SuccessTier | None = None,
    ) -> RollResult:
        """Apply a reroll to the current result and record it."""
        result = reroll(self.current, kind, indexes=indexes, forfeit=forfeit, rng=self.rng)
        self.history.append(result)
        return result

    def all_in(self) -> RollResult:
        """Go All In on the current result and record it."""
        result = all_in(self.current, rng=self.rng)
        self.history.append(result)
        return result

    def finish(self) -> RollResult:
        """Finish the chain and return the final result."""
        result = finish(self.current)
        if result is not self.current:
            self.history.append(result)
        return result
