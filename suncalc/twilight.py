"""Registry of solar elevation angles that name morning/evening phase events."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Iterator, List, Tuple

__all__ = [
    "DEFAULT_TWILIGHT_ANGLES",
    "TwilightAngle",
    "TwilightAngleTable",
    "add_twilight_angle",
    "get_twilight_angles",
]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwilightAngle:
    """Sun elevation in degrees with the names of its morning and evening crossings."""

    angle: float
    morning_name: str
    evening_name: str


@dataclass(frozen=True)
class TwilightAngleTable:
    """Immutable, ordered collection of :class:`TwilightAngle` entries."""

    entries: Tuple[TwilightAngle, ...] = ()

    def add(self, angle: float, morning_name: str, evening_name: str) -> "TwilightAngleTable":
        """Return a new table with one more entry appended.

        No validation or de-duplication is performed; a later entry reusing a
        name overrides the earlier one in solar time results.
        """

        return TwilightAngleTable(
            self.entries + (TwilightAngle(angle, morning_name, evening_name),)
        )

    def names(self) -> List[str]:
        names: List[str] = []
        for entry in self.entries:
            names.extend((entry.morning_name, entry.evening_name))
        return names

    def __iter__(self) -> Iterator[TwilightAngle]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


DEFAULT_TWILIGHT_ANGLES = TwilightAngleTable(
    (
        TwilightAngle(-0.833, "sunrise", "sunset"),
        TwilightAngle(-0.3, "sunriseEnd", "sunsetStart"),
        TwilightAngle(-6.0, "dawn", "dusk"),
        TwilightAngle(-12.0, "nauticalDawn", "nauticalDusk"),
        TwilightAngle(-18.0, "nightEnd", "night"),
        TwilightAngle(6.0, "goldenHourEnd", "goldenHour"),
    )
)

_TABLE = DEFAULT_TWILIGHT_ANGLES
_TABLE_LOCK = Lock()


def get_twilight_angles() -> TwilightAngleTable:
    """Snapshot of the process-wide table."""

    return _TABLE


def add_twilight_angle(angle: float, morning_name: str, evening_name: str) -> TwilightAngleTable:
    """Append an entry to the process-wide table used by default for solar times.

    Intended for configuration time: computations already running keep the
    snapshot they started with.
    """

    global _TABLE

    with _TABLE_LOCK:
        _TABLE = _TABLE.add(angle, morning_name, evening_name)
        table = _TABLE
    LOGGER.info(
        json.dumps(
            {
                "event": "twilight_angle_added",
                "angle": angle,
                "morning": morning_name,
                "evening": evening_name,
                "entries": len(table),
            }
        )
    )
    return table
