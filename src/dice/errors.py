"""Dice engine errors.

Every error is local to the call that raised it: the engine keeps no
state between calls, so the prior RollResult stays valid.
"""


class DiceError(Exception):
    """Base class for dice engine errors."""

    pass


class InvalidPoolSize(DiceError, ValueError):
    """A pool of zero or fewer dice was requested."""

    pass


class InvalidTransition(DiceError):
    """The reroll state machine was driven out of order."""

    pass


class InvalidModifierInput(DiceError, ValueError):
    """A modifier could not be read as an integer.

    Treated as zero by the modifier calculator unless strict mode is on.
    """

    pass
