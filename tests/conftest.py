"""Core test fixtures for dice engine tests."""

import pytest

from src.config import Settings, get_settings
from src.services.collaborators import (
    CharacterSnapshot,
    InMemoryCharacterStore,
    InMemoryChatSink,
)


class ScriptedRandom:
    """Random source that hands out preset die faces in order.

    Fails the test if asked for more values than were scripted, or for a
    value outside the requested range.
    """

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        if not self.values:
            raise AssertionError("Not enough scripted dice for this test.")
        value = self.values.pop(0)
        if not a <= value <= b:
            raise AssertionError(f"Scripted value {value} outside {a}..{b}")
        self.calls += 1
        return value


@pytest.fixture
def scripted_rng():
    """Factory for a ScriptedRandom: ``scripted_rng(2, 2, 5)``."""

    def _make(*values: int) -> ScriptedRandom:
        return ScriptedRandom(values)

    return _make


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def rook() -> CharacterSnapshot:
    """A hero with Nerves 3, Shoot 2, Nervous, 2 Adrenaline and 6 Grit."""
    return CharacterSnapshot(
        id="rook",
        name="Rook",
        attributes={"brawn": 2, "nerves": 3, "smooth": 1, "focus": 2, "crime": 1},
        skills={"shoot": 2, "fight": 1, "cool": 1},
        conditions=["Nervous"],
        resources={"adrenaline": 2, "grit": 6},
    )


@pytest.fixture
def store(rook: CharacterSnapshot) -> InMemoryCharacterStore:
    """Character store holding Rook."""
    return InMemoryCharacterStore([rook])


@pytest.fixture
def chat() -> InMemoryChatSink:
    """Chat sink that records posted messages."""
    return InMemoryChatSink()
