"""Collaborators of the dice engine.

The engine reads a hero's numbers from a character-resource store and
reports resource changes back to it as deltas; the finished roll is
posted to a chat sink as one line of text. Both live outside the
engine, so only their interfaces are defined here, plus in-memory
implementations for the CLI and tests.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from src.dice.conditions import Condition, active_conditions
from src.dice.errors import InvalidModifierInput
from src.dice.modifiers import coerce_modifier


logger = logging.getLogger(__name__)

BROKEN_AFTER = 3  # Distinct "You Look" conditions that break a hero


class CharacterNotFound(KeyError):
    """No character with the requested id."""

    pass


@dataclass(frozen=True)
class ResourceDelta:
    """A change to a character resource, reported for the store to apply.

    Attributes:
        resource: Resource key (e.g. "adrenaline", "grit").
        amount: Signed change; spends and losses are negative.
        reason: Short description for logs and audit.
    """

    resource: str
    amount: int
    reason: str = ""


def _number(value: Any, name: str) -> int:
    try:
        return coerce_modifier(value, name)
    except InvalidModifierInput as e:
        logger.warning("%s; reading it as 0", e)
        return 0


def _meter_value(value: Any, name: str) -> int:
    # Meters are stored as {"current": n, "max": m}
    if isinstance(value, Mapping):
        value = value.get("current")
    return _number(value, name)


class CharacterSnapshot(BaseModel):
    """Read-only view of the numbers a roll needs.

    Keys are lowercase. Use ``from_payload`` to build one from a stored
    character record.
    """

    id: str
    name: str = ""
    attributes: dict[str, int] = Field(default_factory=dict)
    skills: dict[str, int] = Field(default_factory=dict)
    conditions: list[str] = Field(default_factory=list)
    feats: list[str] = Field(default_factory=list)
    resources: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CharacterSnapshot":
        """Build a snapshot from a stored character record.

        Tolerates the shapes older records use: resources nested under
        ``resources`` (top-level values win), capitalised keys, numeric
        strings, Grit stored as a meter, conditions stored as a
        ``{name: flag}`` mapping, and conditions stored as a
        ``youLookSelected`` list plus an ``isBroken`` flag. Three or more
        distinct ``youLookSelected`` entries count as Broken.
        """
        nested = payload.get("resources") or {}

        resources: dict[str, int] = {}
        for key in ("adrenaline", "luck", "spotlight", "cash"):
            raw = payload.get(key, nested.get(key))
            if raw is not None:
                resources[key] = _number(raw, key)
        grit = payload.get("grit", nested.get("grit"))
        if grit is not None:
            resources["grit"] = _meter_value(grit, "grit")

        # Three or more distinct "You Look" conditions make a hero Broken
        selected = payload.get("youLookSelected")
        if not isinstance(selected, list):
            selected = []
        you_look = list(dict.fromkeys(s for s in selected if isinstance(s, str)))
        found = active_conditions(payload.get("conditions"))
        found.extend(active_conditions(you_look))
        if payload.get("isBroken") or len(you_look) >= BROKEN_AFTER:
            found.append(Condition.BROKEN)
        conditions = list(dict.fromkeys(c.value for c in found))

        feats = []
        for feat in payload.get("feats") or []:
            name = feat.get("name") if isinstance(feat, Mapping) else feat
            if isinstance(name, str) and name.strip():
                feats.append(name.strip())

        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            attributes={
                str(k).lower(): _number(v, str(k))
                for k, v in (payload.get("attributes") or {}).items()
            },
            skills={
                str(k).lower(): _number(v, str(k))
                for k, v in (payload.get("skills") or {}).items()
            },
            conditions=conditions,
            feats=feats,
            resources=resources,
        )

    def attribute(self, name: str) -> int:
        """Attribute value, 0 if the character has none."""
        return self.attributes.get(name.lower(), 0)

    def skill(self, name: str) -> int:
        """Skill value, 0 if the character has none."""
        return self.skills.get(name.lower(), 0)

    def balance(self, resource: str) -> int:
        """Current amount of a resource, 0 if untracked."""
        return self.resources.get(resource, 0)

    def spendable(self, resource: str, fallback: str = "luck") -> tuple[str, int]:
        """Resource to spend and its balance.

        Characters that track Luck instead of Adrenaline spend Luck.
        """
        if resource in self.resources or fallback not in self.resources:
            return resource, self.balance(resource)
        return fallback, self.balance(fallback)


@runtime_checkable
class CharacterResourceStore(Protocol):
    """Source of character numbers and sink for resource deltas."""

    def get_character(self, character_id: str) -> CharacterSnapshot:
        """Current snapshot of a character.

        Raises:
            CharacterNotFound: If the id is unknown.
        """
        ...

    def apply_delta(self, character_id: str, delta: ResourceDelta) -> None:
        """Record a resource change. Fire-and-forget for the caller."""
        ...


@runtime_checkable
class ChatSink(Protocol):
    """Destination for finished roll summaries."""

    def post(self, campaign_id: str, content: str) -> None:
        """Post one message to a campaign's chat."""
        ...


class InMemoryCharacterStore:
    """Character store backed by a dict.

    Deltas are applied optimistically and floored at zero; every
    reported delta is kept in ``applied`` for inspection.
    """

    def __init__(self, characters: list[CharacterSnapshot] | None = None):
        self._characters: dict[str, CharacterSnapshot] = {}
        self.applied: list[tuple[str, ResourceDelta]] = []
        for character in characters or []:
            self.add(character)

    def add(self, character: CharacterSnapshot) -> None:
        self._characters[character.id] = character

    def get_character(self, character_id: str) -> CharacterSnapshot:
        try:
            return self._characters[character_id]
        except KeyError:
            raise CharacterNotFound(character_id) from None

    def apply_delta(self, character_id: str, delta: ResourceDelta) -> None:
        character = self.get_character(character_id)
        resources = dict(character.resources)
        resources[delta.resource] = max(0, resources.get(delta.resource, 0) + delta.amount)
        self._characters[character_id] = character.model_copy(update={"resources": resources})
        self.applied.append((character_id, delta))
        logger.debug("Applied %s to %s", delta, character_id)


class InMemoryChatSink:
    """Chat sink that keeps posted messages in a list."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def post(self, campaign_id: str, content: str) -> None:
        self.messages.append((campaign_id, content))
