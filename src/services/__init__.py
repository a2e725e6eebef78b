"""Services that run the dice engine against campaign collaborators."""

from src.services.collaborators import (
    CharacterNotFound,
    CharacterResourceStore,
    CharacterSnapshot,
    ChatSink,
    InMemoryCharacterStore,
    InMemoryChatSink,
    ResourceDelta,
)
from src.services.roll_service import (
    ResourceUnavailable,
    RollReport,
    RollService,
    RollSession,
    format_roll_summary,
)

__all__ = [
    "CharacterNotFound",
    "CharacterResourceStore",
    "CharacterSnapshot",
    "ChatSink",
    "InMemoryCharacterStore",
    "InMemoryChatSink",
    "ResourceDelta",
    "ResourceUnavailable",
    "RollReport",
    "RollService",
    "RollSession",
    "format_roll_summary",
]
