"""Roll service: runs a hero's roll chain against the collaborators.

Reads the hero from the character store, builds the pool (condition
penalties and the optional bonus die included), drives the reroll /
All In sequence, then reports Adrenaline and Grit changes as deltas
and posts a one-line summary to the campaign chat.
"""

import logging
import random
from dataclasses import dataclass, field

from src.config import Settings, get_settings
from src.dice.chain import RollChain
from src.dice.checks import Difficulty, outcome_label, passes_difficulty
from src.dice.conditions import Attribute, condition_penalties
from src.dice.errors import DiceError, InvalidTransition
from src.dice.gamble import gamble_surcharge
from src.dice.modifiers import build_pool
from src.dice.roller import RandomSource
from src.dice.types import PoolBreakdown, RerollKind, RerollState, RollResult, SuccessTier
from src.services.collaborators import CharacterResourceStore, ChatSink, ResourceDelta


logger = logging.getLogger(__name__)


class ResourceUnavailable(DiceError):
    """The hero has nothing left to spend on a paid action."""

    pass


@dataclass
class RollSession:
    """One hero's roll chain, from first roll to report."""

    character_id: str
    character_name: str
    attribute: Attribute
    skill: str
    breakdown: PoolBreakdown
    chain: RollChain
    is_gamble: bool = False
    free_reroll: bool = False
    difficulty: Difficulty | None = None
    deltas: list[ResourceDelta] = field(default_factory=list)
    reported: bool = False

    @property
    def current(self) -> RollResult:
        return self.chain.current


@dataclass(frozen=True)
class RollReport:
    """Outcome of a finished roll chain."""

    character_id: str
    result: RollResult
    breakdown: PoolBreakdown
    gamble_cost: int
    passed: bool | None
    summary: str
    deltas: tuple[ResourceDelta, ...] = ()


def _tier_counts(result: RollResult) -> str:
    parts = [
        f"{tier.label} x{count}"
        for tier, count in sorted(result.counts.items(), reverse=True)
        if count
    ]
    return " · ".join(parts) or "None"


def format_roll_summary(
    session: RollSession,
    result: RollResult,
    gamble_cost: int = 0,
    passed: bool | None = None,
    gamble_resource: str = "grit",
) -> str:
    """Build the chat line for a finished roll.

    Examples:
        "Rook rolled Nerves + Shoot (5d6): 2 2 5 5 5 -> Critical
        (Critical x1 · Basic x1) | Re-roll improved | Gamble: -1 Grit"
    """
    faces = " ".join(str(f) for f in result.faces)
    who = session.character_name or session.character_id
    head = (
        f"{who} rolled {session.attribute.value.title()} + {session.skill.title()} "
        f"({result.pool_size}d6): {faces} -> {outcome_label(result)} ({_tier_counts(result)})"
    )

    notes = []
    for step in session.chain.history[1:]:
        if step.state.is_reroll:
            if step.improved:
                notes.append("Re-roll improved")
            elif step.lost_one_on_reroll:
                notes.append("Lost 1 success on Re-roll")
            else:
                notes.append("Re-roll did not improve")
        elif step.state == RerollState.ALL_IN_USED:
            notes.append("All-In bust (lost all)" if step.all_in_bust else "All-In paid off")
    if gamble_cost:
        notes.append(f"Gamble: -{gamble_cost} {gamble_resource.title()}")
    if passed is not None and session.difficulty is not None:
        verdict = "pass" if passed else "fail"
        notes.append(f"{session.difficulty.value.title()} check: {verdict}")

    return " | ".join([head, *notes])


class RollService:
    """Runs roll chains for heroes held in a character store."""

    def __init__(
        self,
        store: CharacterResourceStore,
        chat: ChatSink | None = None,
        settings: Settings | None = None,
        rng: RandomSource | None = None,
    ):
        self.store = store
        self.chat = chat
        self.settings = settings or get_settings()
        if rng is None and self.settings.rng_seed is not None:
            rng = random.Random(self.settings.rng_seed)
        self.rng = rng

    def _report(self, session: RollSession, delta: ResourceDelta) -> None:
        session.deltas.append(delta)
        self.store.apply_delta(session.character_id, delta)

    def start(
        self,
        character_id: str,
        attribute: Attribute | str,
        skill: str,
        *,
        ad_hoc: int = 0,
        spend_adrenaline: bool = False,
        is_gamble: bool = False,
        free_reroll: bool = False,
        difficulty: Difficulty | str | None = None,
    ) -> RollSession:
        """Build the pool for a hero and make the initial roll.

        Args:
            character_id: Hero to roll for.
            attribute: Attribute used for the roll.
            skill: Skill used for the roll.
            ad_hoc: Free-form adjustment from the Director.
            spend_adrenaline: Spend Adrenaline (or Luck) for +1 die. Ignored
                with a warning if the hero has none.
            is_gamble: Charge Grit for every 1 in the final pool.
            free_reroll: The hero holds a Free Re-roll for this roll.
            difficulty: Optional difficulty to judge the final result against.

        Returns:
            RollSession holding the initial result.

        Raises:
            CharacterNotFound: If the hero is unknown.
            ValueError: If the attribute or difficulty is unknown.
        """
        character = self.store.get_character(character_id)
        if not isinstance(attribute, Attribute):
            attribute = Attribute(attribute.strip().lower())
        skill = skill.strip().lower()
        if difficulty is not None:
            difficulty = Difficulty(difficulty)

        spending = False
        deltas = []
        if spend_adrenaline:
            resource, balance = character.spendable(self.settings.spend_resource)
            cost = self.settings.bonus_die_cost
            if balance >= cost:
                spending = True
                deltas.append(ResourceDelta(resource, -cost, "bonus die"))
            else:
                logger.warning(
                    "%s has no %s to spend; rolling without the bonus die",
                    character_id,
                    resource,
                )

        breakdown = build_pool(
            character.attribute(attribute.value),
            character.skill(skill),
            condition_penalties(attribute, character.conditions),
            spending,
            ad_hoc,
            min_dice=self.settings.min_pool_size,
            max_dice=self.settings.max_pool_size,
        )

        session = RollSession(
            character_id=character_id,
            character_name=character.name,
            attribute=attribute,
            skill=skill,
            breakdown=breakdown,
            chain=RollChain.start(breakdown.size, rng=self.rng),
            is_gamble=is_gamble,
            free_reroll=free_reroll,
            difficulty=difficulty,
        )
        for delta in deltas:
            self._report(session, delta)

        logger.info(
            "%s rolled %dd6 (%s + %s): %s",
            character_id,
            breakdown.size,
            attribute.value,
            skill,
            session.current.faces,
        )
        return session

    def reroll(
        self,
        session: RollSession,
        kind: RerollKind | str,
        forfeit: SuccessTier | None = None,
    ) -> RollResult:
        """Reroll the loose dice of a session.

        A normal reroll costs Adrenaline (or Luck); a free reroll uses up
        the session's Free Re-roll.

        Raises:
            ResourceUnavailable: If a normal reroll cannot be paid for.
            InvalidTransition: If the reroll is not allowed now.
        """
        kind = RerollKind(kind)
        self._check_open(session)

        if kind == RerollKind.FREE:
            if not session.free_reroll:
                raise InvalidTransition("No Free Re-roll available for this roll")
            result = session.chain.reroll(kind)
            session.free_reroll = False
            return result

        if not session.chain.can_reroll(kind):
            raise InvalidTransition(
                f"A normal reroll is not allowed now (state: {session.chain.state.value}, "
                f"successes: {session.current.total_successes})"
            )

        character = self.store.get_character(session.character_id)
        resource, balance = character.spendable(self.settings.spend_resource)
        cost = self.settings.paid_reroll_cost
        if balance < cost:
            raise ResourceUnavailable(f"Re-roll needs {cost} {resource}, have {balance}")

        result = session.chain.reroll(kind, forfeit=forfeit)
        self._report(session, ResourceDelta(resource, -cost, "re-roll"))
        return result

    def all_in(self, session: RollSession) -> RollResult:
        """Go All In on a session after an improving reroll."""
        self._check_open(session)
        return session.chain.all_in()

    def finish(self, session: RollSession, campaign_id: str | None = None) -> RollReport:
        """Close the chain, charge the Gamble and post the summary.

        Can only be called once per session.

        Raises:
            InvalidTransition: If the session was already reported.
        """
        self._check_open(session)
        final = session.chain.finish()
        session.reported = True

        cost = gamble_surcharge(final, session.is_gamble)
        if cost:
            self._report(
                session,
                ResourceDelta(self.settings.gamble_resource, -cost, "gamble"),
            )

        passed = None
        if session.difficulty is not None:
            passed = passes_difficulty(
                final, session.difficulty, three_for_one=self.settings.three_for_one
            )

        summary = format_roll_summary(
            session, final, cost, passed, gamble_resource=self.settings.gamble_resource
        )
        if campaign_id is not None and self.chat is not None:
            self.chat.post(campaign_id, summary)

        return RollReport(
            character_id=session.character_id,
            result=final,
            breakdown=session.breakdown,
            gamble_cost=cost,
            passed=passed,
            summary=summary,
            deltas=tuple(session.deltas),
        )

    @staticmethod
    def _check_open(session: RollSession) -> None:
        if session.reported:
            raise InvalidTransition("Roll already reported")
