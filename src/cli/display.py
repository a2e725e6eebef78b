"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.dice.types import PoolBreakdown, RerollState, RollResult, SuccessTier
from src.services.collaborators import CharacterSnapshot, ResourceDelta


# Shared console instance
console = Console()


TIER_STYLES = {
    SuccessTier.BASIC: "green",
    SuccessTier.CRITICAL: "bold green",
    SuccessTier.EXTREME: "bold cyan",
    SuccessTier.IMPOSSIBLE: "bold magenta",
    SuccessTier.JACKPOT: "bold yellow",
}

STEP_TITLES = {
    RerollState.INITIAL: "Roll",
    RerollState.NORMAL_REROLL_USED: "Re-roll",
    RerollState.FREE_REROLL_USED: "Free Re-roll",
    RerollState.ALL_IN_USED: "All In",
    RerollState.TERMINAL: "Final",
}

GRIT_MAX = 12


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    """Display success message.

    Args:
        message: Success message.
    """
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    """Display info message.

    Args:
        message: Info message.
    """
    console.print(f"[dim]{message}[/dim]")


def _format_faces(result: RollResult) -> Text:
    """Render a pool with each die styled by its role.

    Dice in a success take the tier color, loose dice are dim and
    dice whose success was forfeited are struck through.

    Args:
        result: Result to render.

    Returns:
        Rich Text with the faces separated by spaces.
    """
    style_by_face = {s.face: TIER_STYLES[s.tier] for s in result.successes}
    forfeited_faces = {s.face for s in result.forfeited}

    text = Text()
    for position, face in enumerate(result.faces):
        if position:
            text.append(" ")
        if face in style_by_face:
            text.append(str(face), style=style_by_face[face])
        elif face in forfeited_faces:
            text.append(str(face), style="strike red")
        else:
            text.append(str(face), style="dim")
    return text


def _create_progress_bar(value: int, max_value: int, width: int = 12) -> Text:
    """Create a Rich Text meter with color coding.

    Args:
        value: Current value.
        max_value: Maximum value.
        width: Bar width in characters.

    Returns:
        Rich Text object with styled meter.
    """
    value = max(0, min(value, max_value)) if max_value > 0 else 0
    filled = int((value / max_value) * width) if max_value > 0 else 0
    empty = width - filled

    ratio = value / max_value if max_value > 0 else 0
    if ratio > 0.6:
        color = "green"
    elif ratio > 0.3:
        color = "yellow"
    else:
        color = "red"

    bar_text = Text()
    bar_text.append("[", style="dim")
    bar_text.append("=" * filled, style=color)
    bar_text.append(" " * empty, style="dim")
    bar_text.append("]", style="dim")

    return bar_text


def display_pool_breakdown(breakdown: PoolBreakdown) -> None:
    """Display how the pool size was built.

    Args:
        breakdown: Pool breakdown from the modifier calculator.
    """
    table = Table(title="Dice Pool", box=box.ROUNDED)
    table.add_column("Source", style="white")
    table.add_column("Dice", justify="right", style="cyan")

    table.add_row("Attribute", str(breakdown.attribute))
    table.add_row("Skill", str(breakdown.skill))
    if breakdown.condition_penalty:
        table.add_row("Conditions", f"[red]{breakdown.condition_penalty}[/red]")
    if breakdown.resource_bonus:
        table.add_row("Adrenaline", f"[green]+{breakdown.resource_bonus}[/green]")
    if breakdown.ad_hoc:
        sign = "+" if breakdown.ad_hoc > 0 else ""
        table.add_row("Ad-hoc", f"{sign}{breakdown.ad_hoc}")

    total = f"[bold]{breakdown.size}[/bold]"
    if breakdown.clamped:
        total += f" [dim](from {breakdown.raw})[/dim]"
    table.add_row("[bold]Pool[/bold]", total)

    console.print(table)


def display_roll_result(result: RollResult, title: str | None = None) -> None:
    """Display a tallied roll: faces, successes and chain flags.

    Args:
        result: Result to display.
        title: Panel title; defaults to the chain step that produced it.
    """
    lines = Text()
    lines.append("Dice: ", style="bold")
    lines.append_text(_format_faces(result))
    lines.append("\n")

    if result.successes:
        for success in result.successes:
            lines.append(f"  {success.tier.label}", style=TIER_STYLES[success.tier])
            lines.append(f"  {success.size} x {success.face}\n")
    else:
        lines.append("  No successes\n", style="red")

    if result.loose:
        loose = ", ".join(f"{d.face}" for d in result.loose)
        lines.append(f"Loose: {loose}\n", style="dim")

    if result.improved is True and result.state != RerollState.INITIAL:
        lines.append("Improved\n", style="green")
    if result.lost_one_on_reroll:
        lines.append("Not better: lost 1 success\n", style="yellow")
    if result.all_in_bust:
        lines.append("All-In bust: lost every success\n", style="bold red")

    panel = Panel(
        lines,
        title=f"[bold]{title or STEP_TITLES[result.state]}[/bold]",
        border_style="red" if result.all_in_bust else "cyan",
        padding=(0, 2),
    )
    console.print(panel)


def display_hero(character: CharacterSnapshot) -> None:
    """Display the numbers of a hero that matter for rolling.

    Args:
        character: Snapshot of the hero.
    """
    console.print()
    console.print(f"[bold cyan]{character.name or character.id}[/bold cyan]")

    if character.attributes:
        attr_table = Table(title="Attributes", box=box.ROUNDED)
        attr_table.add_column("Attribute", style="white")
        attr_table.add_column("Value", justify="center", style="cyan")
        for name, value in character.attributes.items():
            attr_table.add_row(name.title(), str(value))
        console.print(attr_table)

    grit = character.balance("grit")
    meter = Text("Grit ")
    meter.append_text(_create_progress_bar(grit, GRIT_MAX))
    meter.append(f" {grit}/{GRIT_MAX}")
    console.print(meter)

    adrenaline = character.resources.get("adrenaline", character.balance("luck"))
    console.print(f"Adrenaline: [cyan]{adrenaline}[/cyan]")

    if character.conditions:
        console.print(f"Conditions: [yellow]{', '.join(character.conditions)}[/yellow]")
    console.print()


def display_deltas(deltas: list[ResourceDelta] | tuple[ResourceDelta, ...]) -> None:
    """Display the resource changes reported by a roll.

    Args:
        deltas: Reported resource deltas.
    """
    if not deltas:
        return

    table = Table(title="Resources", box=box.ROUNDED)
    table.add_column("Resource", style="white")
    table.add_column("Change", justify="right")
    table.add_column("Why", style="dim")
    for delta in deltas:
        color = "red" if delta.amount < 0 else "green"
        table.add_row(
            delta.resource.title(),
            f"[{color}]{delta.amount:+d}[/{color}]",
            delta.reason,
        )
    console.print(table)
