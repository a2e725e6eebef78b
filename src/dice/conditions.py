"""Condition penalties.

Each condition a hero suffers removes one die from rolls with its
attribute. Broken removes one die from every roll, on top of any
attribute-specific condition.

    Hurt        -> Brawn
    Nervous     -> Nerves
    Distracted  -> Focus
    Like a Fool -> Smooth
    Scared      -> Crime
    Tired       -> (no dice penalty)
    Broken      -> every attribute
"""

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any


CONDITION_PENALTY = -1


class Attribute(str, Enum):
    """Hero attributes."""

    BRAWN = "brawn"
    NERVES = "nerves"
    SMOOTH = "smooth"
    FOCUS = "focus"
    CRIME = "crime"


SKILLS = (
    "endure", "fight", "force", "stunt",
    "cool", "drive", "shoot", "survival",
    "flirt", "leadership", "speech", "style",
    "detect", "fix", "heal", "know",
    "awareness", "dexterity", "stealth", "streetwise",
)


class Condition(str, Enum):
    """Conditions a hero can suffer."""

    HURT = "Hurt"
    NERVOUS = "Nervous"
    DISTRACTED = "Distracted"
    LIKE_A_FOOL = "Like a Fool"
    SCARED = "Scared"
    TIRED = "Tired"
    BROKEN = "Broken"


CONDITION_ATTRIBUTES: dict[Condition, Attribute] = {
    Condition.HURT: Attribute.BRAWN,
    Condition.NERVOUS: Attribute.NERVES,
    Condition.DISTRACTED: Attribute.FOCUS,
    Condition.LIKE_A_FOOL: Attribute.SMOOTH,
    Condition.SCARED: Attribute.CRIME,
}

# Lookup keys are lowercase letters only: "Like a Fool", "LikeAFool"
# and "like-a-fool" all become "likeafool".
_ALIASES: dict[str, Condition] = {
    re.sub(r"[^a-z]", "", c.value.lower()): c for c in Condition
}
_ALIASES["fool"] = Condition.LIKE_A_FOOL

_BROKEN_PATTERN = re.compile(r"\bbroken\b", re.IGNORECASE)


def normalize_condition(raw: Any) -> Condition | None:
    """Resolve a stored condition entry to a Condition.

    Args:
        raw: A condition name, or a mapping with a ``name`` key.

    Returns:
        The matching Condition, or None if unrecognized.

    Examples:
        >>> normalize_condition("like a fool")
        <Condition.LIKE_A_FOOL: 'Like a Fool'>
        >>> normalize_condition({"name": "HURT"})
        <Condition.HURT: 'Hurt'>
        >>> normalize_condition("is-broken!")
        <Condition.BROKEN: 'Broken'>
    """
    if isinstance(raw, Mapping):
        raw = raw.get("name")
    if not isinstance(raw, str) or not raw.strip():
        return None

    key = re.sub(r"[^a-z]", "", raw.lower())
    if key in _ALIASES:
        return _ALIASES[key]
    if _BROKEN_PATTERN.search(raw):
        return Condition.BROKEN
    return None


def active_conditions(conditions: Any) -> list[Condition]:
    """Flatten a stored conditions payload into recognized Conditions.

    Accepts a list of names / ``{"name": ...}`` objects, or a mapping of
    name -> flag where only truthy flags count.
    """
    if not conditions:
        return []

    if isinstance(conditions, Mapping):
        entries: Iterable[Any] = [name for name, on in conditions.items() if on]
    elif isinstance(conditions, (list, tuple, set)):
        entries = conditions
    else:
        return []

    found = []
    for entry in entries:
        condition = normalize_condition(entry)
        if condition is not None:
            found.append(condition)
    return found


def condition_penalties(attribute: Attribute | str, conditions: Any) -> list[int]:
    """List the dice penalties that apply to a roll with an attribute.

    One penalty per active condition mapped to the attribute, plus one
    if the hero is Broken (counted once however it is spelled).

    Args:
        attribute: Attribute used for the roll.
        conditions: Stored conditions payload (see ``active_conditions``).

    Returns:
        List of penalties, each -1.
    """
    if not isinstance(attribute, Attribute):
        attribute = Attribute(attribute.strip().lower())
    active = active_conditions(conditions)

    penalties = []
    if Condition.BROKEN in active:
        penalties.append(CONDITION_PENALTY)
    for condition in active:
        if CONDITION_ATTRIBUTES.get(condition) == attribute:
            penalties.append(CONDITION_PENALTY)
    return penalties


def condition_penalty_for_attribute(attribute: Attribute | str, conditions: Any) -> int:
    """Total dice penalty (zero or negative) for an attribute.

    Examples:
        >>> condition_penalty_for_attribute("brawn", ["Hurt", "Broken"])
        -2
        >>> condition_penalty_for_attribute("focus", {"Hurt": True})
        0
    """
    return sum(condition_penalties(attribute, conditions))
