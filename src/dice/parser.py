"""Dice pool notation parser.

Parses written-down pools such as "2 2 5 5 5 1", "2,2,5,5,5,1",
"[6, 6, 6, 6]" or the compact "225551".
"""

import re

from src.dice.errors import DiceError
from src.dice.types import DIE_FACES


class PoolParseError(DiceError, ValueError):
    """Error parsing pool notation."""

    pass


# Separators: whitespace, commas, semicolons; brackets are ignored
SEPARATOR_PATTERN = re.compile(r"[\s,;]+")
BRACKETS_PATTERN = re.compile(r"[\[\](){}]")


def parse_faces(notation: str) -> tuple[int, ...]:
    """Parse pool notation into a tuple of face values.

    A single token made only of digits 1-6 with no separators is read
    one digit per die.

    Args:
        notation: Pool notation string.

    Returns:
        Tuple of face values in the order written.

    Raises:
        PoolParseError: If the notation is empty or holds a value
            that is not a d6 face.

    Examples:
        >>> parse_faces("2 2 5 5 5 1")
        (2, 2, 5, 5, 5, 1)
        >>> parse_faces("[6,6,6,6]")
        (6, 6, 6, 6)
        >>> parse_faces("11446")
        (1, 1, 4, 4, 6)
    """
    if not notation or not notation.strip():
        raise PoolParseError("Pool notation cannot be empty")

    cleaned = BRACKETS_PATTERN.sub(" ", notation).strip()
    tokens = [t for t in SEPARATOR_PATTERN.split(cleaned) if t]

    if not tokens:
        raise PoolParseError(f"Invalid pool notation: '{notation}'")

    # Compact form: "225551"
    if len(tokens) == 1 and len(tokens[0]) > 1 and tokens[0].isdigit():
        tokens = list(tokens[0])

    faces = []
    for token in tokens:
        if not token.isdigit():
            raise PoolParseError(f"Invalid die value '{token}' in '{notation}'")
        value = int(token)
        if value not in DIE_FACES:
            raise PoolParseError(f"Die value must be 1-6, got {value}")
        faces.append(value)

    return tuple(faces)
