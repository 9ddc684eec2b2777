"""
Severity table: level names, numeric ranks and display labels.
"""

from __future__ import annotations

from enum import IntEnum

from .exceptions import ConfigurationError


class SeverityLevel(IntEnum):
    """Ordered severity ranks. Lower rank means more severe.

    NOTHING is a threshold sentinel: a logger set to it writes nothing,
    and messages are never emitted at it.
    """

    NOTHING = 0
    CRITICAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    DEBUG = 5
    EVERYTHING = 6


LEVELS: dict[str, SeverityLevel] = {level.name.lower(): level for level in SeverityLevel}

REVERSE_LEVELS: dict[int, str] = {int(rank): name for name, rank in LEVELS.items()}

LEVEL_LABELS: dict[int, str] = {
    1: " CRT: ",
    2: " ERR: ",
    3: " WRN: ",
    4: " INF: ",
    5: " DBG: ",
    6: " UNK: ",
}

UNKNOWN_LABEL = " UNK: "


def label_of(rank: int) -> str:
    """Return the fixed-width display label for ``rank``; unknown ranks render as UNK."""
    return LEVEL_LABELS.get(rank, UNKNOWN_LABEL)


def rank_of(level: str | int | SeverityLevel) -> SeverityLevel:
    """Resolve a level name (``"debug"``, ``"WARNING"``) or numeric rank."""
    if isinstance(level, SeverityLevel):
        return level

    if isinstance(level, bool):
        raise ConfigurationError(
            f"Unknown log level: {level!r}",
            details={"level": level},
        )

    if isinstance(level, int):
        try:
            return SeverityLevel(level)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unsupported log level rank: {level}",
                details={"level": level},
            ) from exc

    if isinstance(level, str):
        normalized = level.strip().lower()
        if normalized.isdigit():
            return rank_of(int(normalized))
        try:
            return LEVELS[normalized]
        except KeyError as exc:
            raise ConfigurationError(
                f"Unknown log level: {level!r}",
                details={"level": level},
            ) from exc

    raise ConfigurationError(
        f"Unknown log level: {level!r}",
        details={"level": repr(level)},
    )
