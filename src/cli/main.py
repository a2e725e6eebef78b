"""Main CLI application for the dice engine."""

import logging

import typer

from src.cli.commands import dice
from src.config import get_settings

# Create main app
app = typer.Typer(
    name="action-dice",
    help="d6 pool dice roller with rerolls, All In and Gambles",
    add_completion=True,
)

# Add sub-commands
app.add_typer(dice.app, name="dice")

# Shortcuts for the most used commands
app.command(name="roll")(dice.roll)
app.command(name="tally")(dice.tally)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Action Thread dice engine.

    Use 'action-dice roll -a 3 -s 2' for a quick roll, or
    'action-dice dice hero hero.json nerves shoot' to roll for a hero.
    """
    debug = verbose or get_settings().debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
