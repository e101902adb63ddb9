"""Environment-driven configuration for the SunCalc service."""

from __future__ import annotations

import json
import logging
import os
from threading import Lock
from typing import List, Optional

from .twilight import TwilightAngle, TwilightAngleTable, add_twilight_angle, get_twilight_angles

LOGGER = logging.getLogger(__name__)

TWILIGHT_ANGLES_ENV = "SUNCALC_TWILIGHT_ANGLES"
CORS_ORIGINS_ENV = "SUNCALC_CORS_ORIGINS"
LOG_LEVEL_ENV = "SUNCALC_LOG_LEVEL"

_CONFIGURED_ANGLES: Optional[List[TwilightAngle]] = None
_CONFIGURE_LOCK = Lock()


class TwilightConfigError(ValueError):
    """Raised when the twilight angle configuration cannot be parsed."""


def parse_twilight_angles(value: str) -> List[TwilightAngle]:
    """Parse ``angle:morning:evening`` entries separated by ``;``.

    >>> parse_twilight_angles("-4:blueHourStart:blueHourEnd")
    [TwilightAngle(angle=-4.0, morning_name='blueHourStart', evening_name='blueHourEnd')]
    """

    entries: List[TwilightAngle] = []
    for raw in value.split(";"):
        raw = raw.strip()
        if not raw:
            continue
        parts = [part.strip() for part in raw.split(":")]
        if len(parts) != 3 or not parts[1] or not parts[2]:
            raise TwilightConfigError(
                f"Twilight angle must look like 'angle:morning:evening': {raw!r}"
            )
        try:
            angle = float(parts[0])
        except ValueError as exc:
            raise TwilightConfigError(f"Invalid twilight angle {parts[0]!r} in {raw!r}") from exc
        entries.append(TwilightAngle(angle, parts[1], parts[2]))
    return entries


def configure_twilight_angles() -> TwilightAngleTable:
    """Register the angles from ``SUNCALC_TWILIGHT_ANGLES`` once per process.

    Returns the process-wide table after registration.
    """

    global _CONFIGURED_ANGLES

    if _CONFIGURED_ANGLES is not None:
        return get_twilight_angles()

    with _CONFIGURE_LOCK:
        if _CONFIGURED_ANGLES is not None:
            return get_twilight_angles()

        entries = parse_twilight_angles(os.environ.get(TWILIGHT_ANGLES_ENV, ""))
        for entry in entries:
            add_twilight_angle(entry.angle, entry.morning_name, entry.evening_name)

        _CONFIGURED_ANGLES = entries
        table = get_twilight_angles()
        LOGGER.info(
            json.dumps(
                {
                    "event": "twilight_angles_configured",
                    "added": len(entries),
                    "names": table.names(),
                }
            )
        )
        return table


def cors_origins() -> List[str]:
    value = os.environ.get(CORS_ORIGINS_ENV, "*")
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
