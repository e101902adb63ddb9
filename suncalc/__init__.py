"""Sun and moon position, phase and rise/set calculations."""

from .astro import MoonIllumination, MoonPosition, MoonTimes, SolarPosition, SunCalc
from .twilight import (
    DEFAULT_TWILIGHT_ANGLES,
    TwilightAngle,
    TwilightAngleTable,
    add_twilight_angle,
    get_twilight_angles,
)

__all__ = [
    "SunCalc",
    "SolarPosition",
    "MoonPosition",
    "MoonIllumination",
    "MoonTimes",
    "TwilightAngle",
    "TwilightAngleTable",
    "DEFAULT_TWILIGHT_ANGLES",
    "add_twilight_angle",
    "get_twilight_angles",
]
