"""Modifier calculator.

Turns an attribute, a skill and the situational modifiers of a roll into
the number of dice to roll. Player-entered values are read permissively:
anything that is not a number counts as zero.

Also reads the range cells of gear tables ("X", "±0", "+1", "+2G"),
where a "G" cell adds dice but turns the roll into a Gamble.
"""

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.dice.errors import InvalidModifierInput
from src.dice.types import PoolBreakdown


logger = logging.getLogger(__name__)


MIN_POOL_SIZE = 1  # A roll always has at least one die
RESOURCE_BONUS_DICE = 1  # Dice bought by spending Adrenaline before the roll

_TRUE_STRINGS = {"1", "true", "yes", "on", "y"}


def coerce_modifier(value: Any, name: str = "modifier") -> int:
    """Read a modifier as an integer.

    Args:
        value: Raw value; None and "" mean zero.
        name: Field name, for the error message.

    Returns:
        The integer value. Floats are truncated toward zero.

    Raises:
        InvalidModifierInput: If the value is not numeric.

    Examples:
        >>> coerce_modifier("+2")
        2
        >>> coerce_modifier(None)
        0
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InvalidModifierInput(f"{name} must be a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidModifierInput(f"{name} must be finite, got {value!r}")
        return int(value)
    if isinstance(value, str):
        text = value.strip().replace(" ", "")
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            raise InvalidModifierInput(f"{name} must be a number, got {value!r}") from None
    raise InvalidModifierInput(f"{name} must be a number, got {type(value).__name__}")


def _read(value: Any, name: str, strict: bool) -> int:
    if strict:
        return coerce_modifier(value, name)
    try:
        return coerce_modifier(value, name)
    except InvalidModifierInput as e:
        logger.warning("%s; counting it as 0", e)
        return 0


def _is_spending(flag: Any) -> bool:
    if isinstance(flag, str):
        return flag.strip().lower() in _TRUE_STRINGS
    return bool(flag)


def build_pool(
    attribute: Any,
    skill: Any,
    condition_penalties: Iterable[Any] | None = (),
    spend_resource_now: Any = False,
    ad_hoc: Any = 0,
    *,
    min_dice: int = MIN_POOL_SIZE,
    max_dice: int | None = None,
    strict: bool = False,
) -> PoolBreakdown:
    """Sum every contribution to a roll and clamp it into a pool size.

    Modifiers are summed once, before the initial roll; rerolls never
    apply them again.

    Args:
        attribute: Base attribute value.
        skill: Base skill value.
        condition_penalties: One entry per active condition penalty.
            Each subtracts its magnitude, so -1 and 1 both cost a die.
        spend_resource_now: Whether a resource is spent for +1 die.
        ad_hoc: Free-form adjustment, may be negative.
        min_dice: Floor for the pool size (never below 1).
        max_dice: Optional ceiling for the pool size.
        strict: Raise InvalidModifierInput instead of counting bad
            input as zero.

    Returns:
        PoolBreakdown with every contribution and the final size.

    Examples:
        >>> build_pool(3, 2, [-1], True, -1).size
        4
        >>> build_pool(0, 0, [-1, -1]).size
        1
    """
    attr_value = _read(attribute, "attribute", strict)
    skill_value = _read(skill, "skill", strict)
    penalty = -sum(
        abs(_read(p, "condition penalty", strict)) for p in (condition_penalties or ())
    )
    bonus = RESOURCE_BONUS_DICE if _is_spending(spend_resource_now) else 0
    adjustment = _read(ad_hoc, "ad-hoc modifier", strict)

    raw = attr_value + skill_value + penalty + bonus + adjustment
    size = max(max(MIN_POOL_SIZE, min_dice), raw)
    if max_dice is not None:
        size = min(size, max(max_dice, MIN_POOL_SIZE))

    breakdown = PoolBreakdown(
        attribute=attr_value,
        skill=skill_value,
        condition_penalty=penalty,
        resource_bonus=bonus,
        ad_hoc=adjustment,
        raw=raw,
        size=size,
        clamped=size != raw,
    )
    logger.debug("Built pool: %s", breakdown)
    return breakdown


def compute_modified_pool_size(
    attribute: Any,
    skill: Any,
    condition_penalties: Iterable[Any] | None = (),
    spend_resource_now: Any = False,
    ad_hoc: Any = 0,
    **options: Any,
) -> int:
    """Number of dice to roll; see ``build_pool`` for the arguments."""
    return build_pool(
        attribute, skill, condition_penalties, spend_resource_now, ad_hoc, **options
    ).size


class RangeKind(str, Enum):
    """How a gear range cell affects a roll."""

    BLOCKED = "blocked"  # "X": cannot be used at this range
    NEUTRAL = "neutral"  # "±0" or empty
    FLAT = "flat"  # +n / -n dice
    GAMBLE = "gamble"  # +nG: +n dice, and the roll is a Gamble


@dataclass(frozen=True)
class RangeModifier:
    """Parsed gear range cell."""

    kind: RangeKind
    value: int = 0

    @property
    def is_gamble(self) -> bool:
        return self.kind == RangeKind.GAMBLE

    @property
    def is_blocked(self) -> bool:
        return self.kind == RangeKind.BLOCKED

    @property
    def dice(self) -> int:
        """Dice this cell adds to (or removes from) the pool."""
        return self.value if self.kind in (RangeKind.FLAT, RangeKind.GAMBLE) else 0


GAMBLE_CELL_PATTERN = re.compile(r"^\+?(-?\d+)\s*G$", re.IGNORECASE)


def parse_range_cell(cell: Any) -> RangeModifier:
    """Parse a gear range cell.

    Args:
        cell: Cell content: None, "X", "±0", an int, "+2", or "+1G".

    Returns:
        RangeModifier; unreadable cells are neutral.

    Examples:
        >>> parse_range_cell("+1G")
        RangeModifier(kind=<RangeKind.GAMBLE: 'gamble'>, value=1)
        >>> parse_range_cell("X").is_blocked
        True
    """
    if cell is None:
        return RangeModifier(RangeKind.NEUTRAL)
    if isinstance(cell, bool):
        return RangeModifier(RangeKind.NEUTRAL)
    if isinstance(cell, int):
        return RangeModifier(RangeKind.FLAT, cell)

    text = str(cell).strip()
    if text.upper() == "X":
        return RangeModifier(RangeKind.BLOCKED)
    if text in ("±0", "+-0", "0", ""):
        return RangeModifier(RangeKind.NEUTRAL)

    match = GAMBLE_CELL_PATTERN.match(text)
    if match:
        return RangeModifier(RangeKind.GAMBLE, int(match.group(1)))

    try:
        return RangeModifier(RangeKind.FLAT, int(text))
    except ValueError:
        logger.warning("Unreadable range cell %r; treating it as neutral", cell)
        return RangeModifier(RangeKind.NEUTRAL)
