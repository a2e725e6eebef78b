"""Dice resolution engine for d6 pool rolls.

Builds a pool from attribute, skill and modifiers, tallies matching dice
into tiered successes, runs the reroll / All In sequence, and counts the
Gamble surcharge.

Usage:
    >>> from src.dice import compute_modified_pool_size, gamble_surcharge, RollChain, RerollKind
    >>> size = compute_modified_pool_size(3, 2, [-1], spend_resource_now=True, ad_hoc=0)
    >>> chain = RollChain.start(size)
    >>> if chain.can_reroll(RerollKind.NORMAL):
    ...     chain.reroll(RerollKind.NORMAL)
    >>> final = chain.finish()
    >>> grit_cost = gamble_surcharge(final, is_gamble=True)
"""

# Types
from src.dice.types import (
    LooseDie,
    PoolBreakdown,
    RerollKind,
    RerollState,
    RollResult,
    Success,
    SuccessTier,
)

# Errors
from src.dice.errors import (
    DiceError,
    InvalidModifierInput,
    InvalidPoolSize,
    InvalidTransition,
)

# Parser
from src.dice.parser import parse_faces, PoolParseError

# Modifiers & Conditions
from src.dice.modifiers import (
    RangeKind,
    RangeModifier,
    build_pool,
    coerce_modifier,
    compute_modified_pool_size,
    parse_range_cell,
)
from src.dice.conditions import (
    Attribute,
    Condition,
    SKILLS,
    condition_penalties,
    condition_penalty_for_attribute,
    normalize_condition,
)

# Roller & Tallier
from src.dice.roller import roll_pool, reroll_faces
from src.dice.tally import classify_group, tally

# State machine
from src.dice.chain import RollChain, all_in, finish, forfeit_one, is_better, reroll

# Gamble & Checks
from src.dice.gamble import gamble_surcharge
from src.dice.checks import (
    Difficulty,
    highest_tier,
    outcome_label,
    passes_difficulty,
    promoted_counts,
)

__all__ = [
    # Types
    "LooseDie",
    "PoolBreakdown",
    "RerollKind",
    "RerollState",
    "RollResult",
    "Success",
    "SuccessTier",
    # Errors
    "DiceError",
    "InvalidModifierInput",
    "InvalidPoolSize",
    "InvalidTransition",
    # Parser
    "parse_faces",
    "PoolParseError",
    # Modifiers
    "RangeKind",
    "RangeModifier",
    "build_pool",
    "coerce_modifier",
    "compute_modified_pool_size",
    "parse_range_cell",
    # Conditions
    "Attribute",
    "Condition",
    "SKILLS",
    "condition_penalties",
    "condition_penalty_for_attribute",
    "normalize_condition",
    # Roller & Tallier
    "roll_pool",
    "reroll_faces",
    "classify_group",
    "tally",
    # State machine
    "RollChain",
    "all_in",
    "finish",
    "forfeit_one",
    "is_better",
    "reroll",
    # Gamble & Checks
    "gamble_surcharge",
    "Difficulty",
    "highest_tier",
    "outcome_label",
    "passes_difficulty",
    "promoted_counts",
]
