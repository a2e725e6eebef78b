"""Dice commands."""

import json
import random
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from src.cli.display import (
    display_deltas,
    display_error,
    display_hero,
    display_info,
    display_pool_breakdown,
    display_roll_result,
    display_success,
)
from src.config import get_settings
from src.dice.chain import RollChain
from src.dice.checks import Difficulty, outcome_label, passes_difficulty
from src.dice.errors import DiceError
from src.dice.gamble import gamble_surcharge
from src.dice.modifiers import build_pool
from src.dice.parser import parse_faces
from src.dice.tally import tally as tally_pool
from src.dice.types import RerollKind, RollResult
from src.services.collaborators import (
    CharacterSnapshot,
    InMemoryCharacterStore,
    InMemoryChatSink,
)
from src.services.roll_service import RollService

app = typer.Typer(help="Roll and tally d6 pools")
console = Console()


ACTIONS = ("reroll", "free", "all-in", "stop")


def _rng(seed: Optional[int]) -> random.Random | None:
    if seed is None:
        seed = get_settings().rng_seed
    return random.Random(seed) if seed is not None else None


def _next_action(planned: list[str], interactive: bool) -> str:
    if planned:
        return planned.pop(0)
    if interactive:
        return typer.prompt(f"Next ({'/'.join(ACTIONS)})", default="stop").strip().lower()
    return "stop"


def _drive(
    planned: list[str],
    interactive: bool,
    step: Callable[[str], RollResult],
) -> None:
    """Apply actions until the player stops.

    Each action is passed to ``step``, which performs it and returns the
    new result. A refused action is reported and the chain goes on.
    """
    planned = [a.strip().lower() for a in planned]
    while True:
        action = _next_action(planned, interactive)
        if action == "stop":
            return
        if action not in ACTIONS:
            display_error(f"Unknown action '{action}' (choose from {', '.join(ACTIONS)})")
            if not interactive:
                raise typer.Exit(1)
            continue
        try:
            display_roll_result(step(action))
        except DiceError as e:
            display_error(str(e))
            if not interactive:
                raise typer.Exit(1)


def _chain_step(chain: RollChain, free_reroll: bool) -> Callable[[str], RollResult]:
    state = {"free": free_reroll}

    def step(action: str) -> RollResult:
        if action == "all-in":
            return chain.all_in()
        if action == "free":
            if not state["free"]:
                raise DiceError("No Free Re-roll available (use --free-reroll)")
            result = chain.reroll(RerollKind.FREE)
            state["free"] = False
            return result
        return chain.reroll(RerollKind.NORMAL)

    return step


@app.command()
def roll(
    attribute: int = typer.Option(0, "--attribute", "-a", help="Attribute value"),
    skill: int = typer.Option(0, "--skill", "-s", help="Skill value"),
    penalty: Optional[list[int]] = typer.Option(None, "--penalty", "-p", help="Condition penalty (repeatable)"),
    spend: bool = typer.Option(False, "--spend", help="Spend Adrenaline for +1 die"),
    ad_hoc: int = typer.Option(0, "--ad-hoc", "-m", help="Ad-hoc modifier"),
    gamble: bool = typer.Option(False, "--gamble", "-g", help="Roll is a Gamble"),
    free_reroll: bool = typer.Option(False, "--free-reroll", help="Hold a Free Re-roll"),
    difficulty: Optional[Difficulty] = typer.Option(None, "--difficulty", "-d", help="Difficulty to check"),
    action: Optional[list[str]] = typer.Option(None, "--action", help="reroll, free, all-in or stop (repeatable)"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Ask for each step"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the dice"),
) -> None:
    """Roll a pool from raw numbers and play out the reroll chain."""
    settings = get_settings()
    breakdown = build_pool(
        attribute,
        skill,
        penalty or [],
        spend,
        ad_hoc,
        min_dice=settings.min_pool_size,
        max_dice=settings.max_pool_size,
    )
    display_pool_breakdown(breakdown)

    chain = RollChain.start(breakdown.size, rng=_rng(seed))
    display_roll_result(chain.current)
    _drive(list(action or []), interactive, _chain_step(chain, free_reroll))

    final = chain.finish()
    display_roll_result(final)
    console.print(f"Outcome: [bold]{outcome_label(final)}[/bold]")

    if difficulty is not None:
        if passes_difficulty(final, difficulty, three_for_one=settings.three_for_one):
            display_success(f"{difficulty.value.title()} check passed")
        else:
            display_error(f"{difficulty.value.title()} check failed")

    cost = gamble_surcharge(final, gamble)
    if cost:
        console.print(f"[red]Gamble: lose {cost} {settings.gamble_resource.title()}[/red]")


@app.command()
def tally(
    faces: list[str] = typer.Argument(..., help="Die faces, e.g. 2 2 5 5 5 1"),
    gamble: bool = typer.Option(False, "--gamble", "-g", help="Roll is a Gamble"),
) -> None:
    """Tally dice you rolled by hand."""
    try:
        pool = parse_faces(" ".join(faces))
    except DiceError as e:
        display_error(str(e))
        raise typer.Exit(1)

    result = tally_pool(pool)
    display_roll_result(result, title="Tally")
    console.print(f"Outcome: [bold]{outcome_label(result)}[/bold]")

    cost = gamble_surcharge(result, gamble)
    if gamble:
        console.print(f"Gamble cost: [red]{cost}[/red]")


@app.command()
def pool(
    attribute: int = typer.Option(0, "--attribute", "-a", help="Attribute value"),
    skill: int = typer.Option(0, "--skill", "-s", help="Skill value"),
    penalty: Optional[list[int]] = typer.Option(None, "--penalty", "-p", help="Condition penalty (repeatable)"),
    spend: bool = typer.Option(False, "--spend", help="Spend Adrenaline for +1 die"),
    ad_hoc: int = typer.Option(0, "--ad-hoc", "-m", help="Ad-hoc modifier"),
) -> None:
    """Show how many dice a roll gets."""
    settings = get_settings()
    display_pool_breakdown(
        build_pool(
            attribute,
            skill,
            penalty or [],
            spend,
            ad_hoc,
            min_dice=settings.min_pool_size,
            max_dice=settings.max_pool_size,
        )
    )


@app.command()
def hero(
    character_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Character JSON"),
    attribute: str = typer.Argument(..., help="Attribute (brawn, nerves, smooth, focus, crime)"),
    skill: str = typer.Argument(..., help="Skill name"),
    spend: bool = typer.Option(False, "--spend", help="Spend Adrenaline for +1 die"),
    ad_hoc: int = typer.Option(0, "--ad-hoc", "-m", help="Ad-hoc modifier"),
    gamble: bool = typer.Option(False, "--gamble", "-g", help="Roll is a Gamble"),
    free_reroll: bool = typer.Option(False, "--free-reroll", help="Hold a Free Re-roll"),
    difficulty: Optional[Difficulty] = typer.Option(None, "--difficulty", "-d", help="Difficulty to check"),
    action: Optional[list[str]] = typer.Option(None, "--action", help="reroll, free, all-in or stop (repeatable)"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Ask for each step"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the dice"),
) -> None:
    """Roll for a hero stored in a character JSON file.

    Conditions and resources come from the file. Resource changes are
    printed, not written back.
    """
    try:
        payload = json.loads(character_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        display_error(f"Invalid character file: {e}")
        raise typer.Exit(1)

    character = CharacterSnapshot.from_payload(payload)
    if not character.id:
        character = character.model_copy(update={"id": character_file.stem})
    store = InMemoryCharacterStore([character])
    service = RollService(store, InMemoryChatSink(), rng=_rng(seed))

    display_hero(character)
    try:
        session = service.start(
            character.id,
            attribute,
            skill,
            ad_hoc=ad_hoc,
            spend_adrenaline=spend,
            is_gamble=gamble,
            free_reroll=free_reroll,
            difficulty=difficulty,
        )
    except ValueError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_pool_breakdown(session.breakdown)
    display_roll_result(session.current)

    def step(name: str) -> RollResult:
        if name == "all-in":
            return service.all_in(session)
        kind = RerollKind.FREE if name == "free" else RerollKind.NORMAL
        return service.reroll(session, kind)

    _drive(list(action or []), interactive, step)

    report = service.finish(session)
    display_roll_result(report.result)
    display_deltas(report.deltas)
    display_info(report.summary)
