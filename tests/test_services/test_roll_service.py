"""Tests for the roll service."""

import logging

import pytest

from src.config import Settings
from src.dice.checks import Difficulty
from src.dice.errors import InvalidTransition
from src.dice.types import RerollKind, RerollState, SuccessTier
from src.services.collaborators import (
    CharacterNotFound,
    CharacterSnapshot,
    InMemoryCharacterStore,
    ResourceDelta,
)
from src.services.roll_service import ResourceUnavailable, RollService


@pytest.fixture
def service_factory(store, chat, settings):
    """Build a RollService with scripted dice."""

    def _make(rng, **overrides) -> RollService:
        current = settings.model_copy(update=overrides) if overrides else settings
        return RollService(store, chat=chat, settings=current, rng=rng)

    return _make


class TestStart:
    """Tests for RollService.start."""

    def test_pool_includes_condition_penalty(self, service_factory, scripted_rng):
        """Nerves 3 + Shoot 2 - 1 (Nervous) = 4 dice."""
        service = service_factory(scripted_rng(2, 2, 5, 3))

        session = service.start("rook", "nerves", "shoot")

        assert session.breakdown.size == 4
        assert session.breakdown.condition_penalty == -1
        assert session.current.faces == (2, 2, 5, 3)
        assert session.current.state == RerollState.INITIAL
        assert session.deltas == []

    def test_unrelated_condition_has_no_penalty(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(1, 2, 3))
        session = service.start("rook", "brawn", "fight")
        assert session.breakdown.size == 3

    def test_bonus_die_spends_adrenaline(self, service_factory, scripted_rng, store):
        service = service_factory(scripted_rng(2, 2, 5, 3, 1))

        session = service.start("rook", "nerves", "shoot", spend_adrenaline=True)

        assert session.breakdown.size == 5
        assert session.breakdown.resource_bonus == 1
        assert session.deltas == [ResourceDelta("adrenaline", -1, "bonus die")]
        assert store.get_character("rook").balance("adrenaline") == 1

    def test_bonus_die_skipped_without_adrenaline(self, chat, settings, scripted_rng, caplog):
        store = InMemoryCharacterStore(
            [CharacterSnapshot(id="kit", attributes={"focus": 2}, resources={"adrenaline": 0})]
        )
        service = RollService(store, chat=chat, settings=settings, rng=scripted_rng(3, 4))

        with caplog.at_level(logging.WARNING, logger="src.services.roll_service"):
            session = service.start("kit", "focus", "fix", spend_adrenaline=True)

        assert session.breakdown.size == 2
        assert session.deltas == []
        assert "rolling without the bonus die" in caplog.text

    def test_luck_pays_for_bonus_die(self, chat, settings, scripted_rng):
        store = InMemoryCharacterStore(
            [CharacterSnapshot(id="kit", attributes={"focus": 2}, resources={"luck": 1})]
        )
        service = RollService(store, chat=chat, settings=settings, rng=scripted_rng(3, 4, 5))

        session = service.start("kit", "focus", "fix", spend_adrenaline=True)

        assert session.deltas == [ResourceDelta("luck", -1, "bonus die")]

    def test_ad_hoc_and_floor(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(6))
        session = service.start("rook", "crime", "stealth", ad_hoc=-5)
        assert session.breakdown.size == 1
        assert session.breakdown.clamped

    def test_max_pool_size_setting(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(1, 2, 3), max_pool_size=3)
        session = service.start("rook", "nerves", "shoot", ad_hoc=4)
        assert session.breakdown.size == 3

    def test_unknown_character(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng())
        with pytest.raises(CharacterNotFound):
            service.start("nobody", "nerves", "shoot")

    def test_unknown_attribute(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng())
        with pytest.raises(ValueError):
            service.start("rook", "charm", "shoot")

    def test_seeded_settings_repeat(self, store, chat, settings):
        seeded = settings.model_copy(update={"rng_seed": 11})
        first = RollService(store, chat=chat, settings=seeded).start("rook", "nerves", "shoot")
        second = RollService(store, chat=chat, settings=seeded).start("rook", "nerves", "shoot")
        assert first.current.faces == second.current.faces


class TestReroll:
    """Tests for RollService.reroll."""

    def test_paid_reroll_spends_adrenaline(self, service_factory, scripted_rng, store):
        service = service_factory(scripted_rng(2, 2, 5, 3, 5, 5))
        session = service.start("rook", "nerves", "shoot")

        result = service.reroll(session, RerollKind.NORMAL)

        assert result.faces == (2, 2, 5, 5)
        assert result.improved is True
        assert session.deltas == [ResourceDelta("adrenaline", -1, "re-roll")]
        assert store.get_character("rook").balance("adrenaline") == 1

    def test_paid_reroll_without_adrenaline(self, chat, settings, scripted_rng):
        store = InMemoryCharacterStore(
            [
                CharacterSnapshot(
                    id="kit",
                    attributes={"focus": 2},
                    skills={"fix": 1},
                    resources={"adrenaline": 0, "grit": 3},
                )
            ]
        )
        service = RollService(store, chat=chat, settings=settings, rng=scripted_rng(4, 4, 2))
        session = service.start("kit", "focus", "fix")

        with pytest.raises(ResourceUnavailable):
            service.reroll(session, "normal")
        assert session.current.state == RerollState.INITIAL

    def test_reroll_without_successes_refused(self, chat, settings, scripted_rng):
        """With nothing to keep, a normal reroll is illegal whatever the balance."""
        store = InMemoryCharacterStore(
            [
                CharacterSnapshot(
                    id="kit",
                    attributes={"focus": 2},
                    skills={"fix": 1},
                    resources={"adrenaline": 0, "grit": 3},
                )
            ]
        )
        service = RollService(store, chat=chat, settings=settings, rng=scripted_rng(1, 2, 3))
        session = service.start("kit", "focus", "fix")

        with pytest.raises(InvalidTransition):
            service.reroll(session, RerollKind.NORMAL)
        assert session.deltas == []
        assert session.current.state == RerollState.INITIAL

    def test_lost_success_reported(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(4, 4, 3, 6, 3, 6))
        session = service.start("rook", "nerves", "shoot")

        result = service.reroll(session, RerollKind.NORMAL, forfeit=SuccessTier.BASIC)

        assert result.lost_one_on_reroll
        assert result.total_successes == 0

    def test_free_reroll_needs_grant(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(1, 2, 3, 4))
        session = service.start("rook", "nerves", "shoot")

        with pytest.raises(InvalidTransition):
            service.reroll(session, RerollKind.FREE)

    def test_free_reroll_is_free(self, service_factory, scripted_rng, store):
        service = service_factory(scripted_rng(1, 2, 3, 4, 1, 1, 1, 1))
        session = service.start("rook", "nerves", "shoot", free_reroll=True)

        result = service.reroll(session, "free")

        assert result.extreme == 1
        assert session.deltas == []
        assert not session.free_reroll
        assert store.get_character("rook").balance("adrenaline") == 2

    def test_only_one_reroll(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(2, 2, 5, 3, 5, 1))
        session = service.start("rook", "nerves", "shoot", free_reroll=True)
        service.reroll(session, RerollKind.NORMAL)

        with pytest.raises(InvalidTransition):
            service.reroll(session, RerollKind.FREE)


class TestFinish:
    """Tests for RollService.finish."""

    def test_full_gamble_chain(self, service_factory, scripted_rng, store, chat):
        """Bonus die, improving reroll, All In bust, Gamble surcharge."""
        service = service_factory(scripted_rng(2, 2, 5, 3, 1, 5, 5, 1, 1))
        session = service.start("rook", "nerves", "shoot", spend_adrenaline=True, is_gamble=True)
        service.reroll(session, RerollKind.NORMAL)
        service.all_in(session)

        report = service.finish(session, campaign_id="camp-1")

        assert report.result.faces == (2, 2, 5, 5, 1)
        assert report.result.all_in_bust
        assert report.result.state == RerollState.TERMINAL
        assert report.gamble_cost == 1
        assert report.deltas == (
            ResourceDelta("adrenaline", -1, "bonus die"),
            ResourceDelta("adrenaline", -1, "re-roll"),
            ResourceDelta("grit", -1, "gamble"),
        )
        assert store.get_character("rook").balance("adrenaline") == 0
        assert store.get_character("rook").balance("grit") == 5

        assert chat.messages == [("camp-1", report.summary)]
        assert report.summary.startswith("Rook rolled Nerves + Shoot (5d6): 2 2 5 5 1 -> Fail")
        assert "Re-roll improved" in report.summary
        assert "All-In bust (lost all)" in report.summary
        assert report.summary.endswith("Gamble: -1 Grit")

    def test_no_gamble_no_grit(self, service_factory, scripted_rng, store):
        service = service_factory(scripted_rng(1, 1, 4, 6))
        session = service.start("rook", "nerves", "shoot")

        report = service.finish(session)

        assert report.gamble_cost == 0
        assert report.deltas == ()
        assert store.get_character("rook").balance("grit") == 6

    def test_no_chat_without_campaign(self, service_factory, scripted_rng, chat):
        service = service_factory(scripted_rng(1, 2, 3, 4))
        service.finish(service.start("rook", "nerves", "shoot"))
        assert chat.messages == []

    def test_difficulty_verdict(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(5, 5, 5, 2))
        session = service.start("rook", "nerves", "shoot", difficulty="critical")

        report = service.finish(session)

        assert report.passed is True
        assert "Critical check: pass" in report.summary

    def test_three_for_one_setting(self, service_factory, scripted_rng):
        dice = (1, 1, 2, 2, 3, 3)
        plain = service_factory(scripted_rng(*dice))
        promoted = service_factory(scripted_rng(*dice), three_for_one=True)

        first = plain.start("rook", "nerves", "shoot", ad_hoc=2, difficulty=Difficulty.CRITICAL)
        second = promoted.start("rook", "nerves", "shoot", ad_hoc=2, difficulty=Difficulty.CRITICAL)

        assert plain.finish(first).passed is False
        assert promoted.finish(second).passed is True

    def test_finish_once(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(2, 2, 5, 3))
        session = service.start("rook", "nerves", "shoot")
        service.finish(session)

        with pytest.raises(InvalidTransition):
            service.finish(session)
        with pytest.raises(InvalidTransition):
            service.reroll(session, RerollKind.NORMAL)

    def test_lost_success_in_summary(self, service_factory, scripted_rng):
        service = service_factory(scripted_rng(4, 4, 3, 6, 3, 6))
        session = service.start("rook", "nerves", "shoot")
        service.reroll(session, RerollKind.NORMAL)

        report = service.finish(session)

        assert "Lost 1 success on Re-roll" in report.summary
        assert "-> Fail (None)" in report.summary


class TestSettingsDefaults:
    """The service falls back to global settings."""

    def test_uses_get_settings(self, store, monkeypatch):
        monkeypatch.setenv("GAMBLE_RESOURCE", "luck")
        service = RollService(store)
        assert isinstance(service.settings, Settings)
        assert service.settings.gamble_resource == "luck"
