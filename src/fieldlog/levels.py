"""
fieldlog Severity Levels

Ordered severity levels used to gate records against the configured
threshold, plus conversion to and from their lowercase wire names.
"""

from enum import IntEnum
from typing import Any


class InvalidLevel(ValueError):
    """Raised when a string does not name a known severity level."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"not a valid Level: {value!r}")


class Level(IntEnum):
    """
    Severity level of a record.

    The integer value is the severity rank, so levels compare directly:
    ``Level.DEBUG < Level.INFO < Level.ERROR``.
    """

    DEBUG = 0
    INFO = 1
    ERROR = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> 'Level':
        """Parse a level name, ignoring case."""
        return parse_level(value)


_LEVELS_BY_NAME = {str(level): level for level in Level}


def level_name(value: Any) -> str:
    """
    Convert a level to its display name.

    Args:
        value: A Level or its integer rank

    Returns:
        "debug", "info" or "error", and "unknown" for anything else
    """
    try:
        return str(Level(value))
    except ValueError:
        return "unknown"


def parse_level(value: str) -> Level:
    """
    Parse a severity name into a Level.

    Args:
        value: Level name such as "info" or "ERROR"

    Returns:
        The matching Level

    Raises:
        InvalidLevel: If the name is not debug, info or error
    """
    if not isinstance(value, str):
        raise InvalidLevel(value)

    level = _LEVELS_BY_NAME.get(value.lower())
    if level is None:
        raise InvalidLevel(value)
    return level
