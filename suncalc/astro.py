"""Sun and moon positions, solar phase times and moon rise/set for an instant."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from . import julian, twilight
from .ephemeris import (
    RAD,
    altitude,
    astro_refraction,
    azimuth,
    declination,
    ecliptic_longitude,
    moon_coords,
    parallactic_angle,
    sidereal_time,
    solar_mean_anomaly,
    sun_coords,
)
from .twilight import TwilightAngleTable

__all__ = [
    "MoonIllumination",
    "MoonPosition",
    "MoonTimes",
    "SolarPosition",
    "SolarTransit",
    "SunCalc",
    "find_rise_set",
    "observer_angle",
    "set_julian",
    "solar_transit",
]

LOGGER = logging.getLogger(__name__)

J0 = 0.0009

DISTANCE_TO_SUN_KM = 149598000  # at perihelion
MOON_HORIZON_OFFSET = 0.133 * RAD


@dataclass(frozen=True)
class SolarPosition:
    azimuth: float
    altitude: float


@dataclass(frozen=True)
class MoonPosition:
    azimuth: float
    altitude: float
    distance: float
    parallactic_angle: float


@dataclass(frozen=True)
class MoonIllumination:
    fraction: float
    phase: float
    angle: float


@dataclass(frozen=True)
class MoonTimes:
    """Moon rise and set for one day.

    ``always_up``/``always_down`` are only set when neither event was found.
    """

    rise: Optional[datetime] = None
    set: Optional[datetime] = None
    always_up: bool = False
    always_down: bool = False


@dataclass(frozen=True)
class SolarTransit:
    """Quantities shared by every twilight angle of one solar day."""

    cycle: int
    mean_anomaly: float
    ecliptic_longitude: float
    declination: float
    noon: float  # Julian day of the true transit


def _julian_cycle(days: float, lw: float) -> int:
    # Rounds halves up.
    return math.floor(days - J0 - lw / (2 * math.pi) + 0.5)


def _approx_transit(hour_angle, lw: float, cycle: int):
    return J0 + (hour_angle + lw) / (2 * math.pi) + cycle


def _solar_transit_j(ds, mean_anomaly, longitude):
    return julian.J2000 + ds + 0.0053 * np.sin(mean_anomaly) - 0.0069 * np.sin(2 * longitude)


def _hour_angle(h, phi, dec):
    return np.arccos((np.sin(h) - np.sin(phi) * np.sin(dec)) / (np.cos(phi) * np.cos(dec)))


def observer_angle(height: float) -> float:
    """Horizon dip in degrees for an observer *height* meters above the horizon."""

    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")
    return -2.076 * math.sqrt(height) / 60


def solar_transit(days: float, lw: float) -> SolarTransit:
    cycle = _julian_cycle(days, lw)
    ds = _approx_transit(0, lw, cycle)
    mean_anomaly = solar_mean_anomaly(ds)
    longitude = ecliptic_longitude(mean_anomaly)
    return SolarTransit(
        cycle=cycle,
        mean_anomaly=float(mean_anomaly),
        ecliptic_longitude=float(longitude),
        declination=float(declination(longitude, 0.0)),
        noon=float(_solar_transit_j(ds, mean_anomaly, longitude)),
    )


def set_julian(h0: float, lw: float, phi: float, transit: SolarTransit) -> float:
    """Julian day at which the sun sinks through elevation *h0* (radians).

    Returns ``nan`` when the sun never reaches *h0* on this day.
    """

    with np.errstate(invalid="ignore", divide="ignore"):
        w = _hour_angle(h0, phi, transit.declination)
    approx = _approx_transit(w, lw, transit.cycle)
    return float(_solar_transit_j(approx, transit.mean_anomaly, transit.ecliptic_longitude))


def find_rise_set(heights: Sequence[float]) -> Tuple[Optional[float], Optional[float], float]:
    """Locate horizon crossings in 25 hourly altitude samples starting at midnight.

    Each two-hour window is fitted with a parabola through its three samples.
    Returns ``(rise_hours, set_hours, ye)`` where the hour offsets are
    ``None`` when not found and ``ye`` is the extreme value of the last
    window examined.
    """

    heights = np.asarray(heights, dtype=float)
    rise: Optional[float] = None
    set_: Optional[float] = None
    ye = 0.0

    h0 = heights[0]
    with np.errstate(invalid="ignore", divide="ignore"):
        for i in range(1, 24, 2):
            h1 = heights[i]
            h2 = heights[i + 1]

            a = (h0 + h2) / 2 - h1
            b = (h2 - h0) / 2
            xe = -b / (2 * a)
            ye = (a * xe + b) * xe + h1
            d = b * b - 4 * a * h1
            roots = 0
            x1 = x2 = 0.0

            if d >= 0:
                dx = np.sqrt(d) / (abs(a) * 2)
                x1 = xe - dx
                x2 = xe + dx
                if abs(x1) <= 1:
                    roots += 1
                if abs(x2) <= 1:
                    roots += 1
                if x1 < -1:
                    x1 = x2

            if roots == 1:
                if h0 < 0:
                    rise = i + float(x1)
                else:
                    set_ = i + float(x1)
            elif roots == 2:
                rise = i + float(x2 if ye < 0 else x1)
                set_ = i + float(x1 if ye < 0 else x2)

            if rise is not None and set_ is not None:
                break

            h0 = h2

    return rise, set_, float(ye)


def _midnight(instant: datetime, zone: tzinfo) -> datetime:
    return instant.astimezone(zone).replace(hour=0, minute=0, second=0, microsecond=0)


def _moon_horizontal(days, lat: float, lng: float):
    lw = RAD * -lng
    phi = RAD * lat
    coords = moon_coords(days)
    hour_angle = sidereal_time(days, lw) - coords.right_ascension
    h = altitude(hour_angle, phi, coords.declination)
    h = h + astro_refraction(h)
    return coords, hour_angle, h


class SunCalc:
    """Sun and moon calculations bound to one absolute instant.

    Parameters
    ----------
    date:
        Timezone-aware datetime.  Its zone only matters for
        :meth:`get_moon_times`, which uses it to pick local midnight.
    """

    def __init__(self, date: datetime) -> None:
        if date.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        self.date = date

    @staticmethod
    def add_twilight_angle(angle: float, morning_name: str, evening_name: str) -> None:
        """Register an extra elevation angle for every later :meth:`get_solar_times` call."""

        twilight.add_twilight_angle(angle, morning_name, evening_name)

    def get_solar_position(self, lat: float, lng: float) -> SolarPosition:
        days = julian.to_days(self.date)
        lw = RAD * -lng
        phi = RAD * lat
        coords = sun_coords(days)
        hour_angle = sidereal_time(days, lw) - coords.right_ascension
        return SolarPosition(
            azimuth=float(azimuth(hour_angle, phi, coords.declination)),
            altitude=float(altitude(hour_angle, phi, coords.declination)),
        )

    def get_solar_times(
        self,
        lat: float,
        lng: float,
        height: float = 0.0,
        angles: Optional[TwilightAngleTable] = None,
    ) -> Dict[str, Optional[datetime]]:
        """Compute solar noon, nadir and the crossings of every twilight angle.

        Parameters
        ----------
        lat, lng:
            Observer coordinates in degrees (east-positive longitude).
        height:
            Observer height above the horizon in meters.
        angles:
            Table of elevation angles to evaluate.  Defaults to the
            process-wide table at call time.

        Returns
        -------
        dict
            ``solarNoon``, ``nadir`` and one key per morning/evening name.
            Names whose angle the sun never crosses on this day map to ``None``.
        """

        table = angles if angles is not None else twilight.get_twilight_angles()
        lw = RAD * -lng
        phi = RAD * lat
        dh = observer_angle(height)

        transit = solar_transit(julian.to_days(self.date), lw)
        result: Dict[str, Optional[datetime]] = {
            "solarNoon": julian.from_julian(transit.noon),
            "nadir": julian.from_julian(transit.noon - 0.5),
        }

        for entry in table:
            j_set = set_julian(RAD * (entry.angle + dh), lw, phi, transit)
            if math.isnan(j_set):
                LOGGER.debug(
                    json.dumps(
                        {
                            "event": "solar_angle_not_reached",
                            "angle": entry.angle,
                            "lat": lat,
                            "lng": lng,
                            "date": self.date.isoformat(),
                        }
                    )
                )
                result[entry.morning_name] = None
                result[entry.evening_name] = None
                continue
            j_rise = transit.noon - (j_set - transit.noon)
            result[entry.morning_name] = julian.from_julian(j_rise)
            result[entry.evening_name] = julian.from_julian(j_set)

        return result

    def get_moon_position(self, lat: float, lng: float) -> MoonPosition:
        """Moon azimuth, refraction-corrected altitude, distance and parallactic angle."""

        days = julian.to_days(self.date)
        coords, hour_angle, h = _moon_horizontal(days, lat, lng)
        phi = RAD * lat
        return MoonPosition(
            azimuth=float(azimuth(hour_angle, phi, coords.declination)),
            altitude=float(h),
            distance=float(coords.distance),
            parallactic_angle=float(parallactic_angle(hour_angle, phi, coords.declination)),
        )

    def get_moon_illumination(self) -> MoonIllumination:
        """Illuminated fraction, phase and bright-limb angle of the moon.

        Based on the IDL Astronomy Library ``mphase`` routine and chapter 48
        of Meeus, Astronomical Algorithms (2nd ed.).
        """

        days = julian.to_days(self.date)
        sun = sun_coords(days)
        moon = moon_coords(days)
        delta_ra = sun.right_ascension - moon.right_ascension

        with np.errstate(invalid="ignore"):
            elongation = np.arccos(
                np.sin(sun.declination) * np.sin(moon.declination)
                + np.cos(sun.declination) * np.cos(moon.declination) * np.cos(delta_ra)
            )
        inc = np.arctan2(
            DISTANCE_TO_SUN_KM * np.sin(elongation),
            moon.distance - DISTANCE_TO_SUN_KM * np.cos(elongation),
        )
        angle = float(
            np.arctan2(
                np.cos(sun.declination) * np.sin(delta_ra),
                np.sin(sun.declination) * np.cos(moon.declination)
                - np.cos(sun.declination) * np.sin(moon.declination) * np.cos(delta_ra),
            )
        )
        sign = -1.0 if angle < 0 else 1.0

        return MoonIllumination(
            fraction=float((1 + np.cos(inc)) / 2),
            phase=float(0.5 + 0.5 * inc * sign / math.pi),
            angle=angle,
        )

    def get_moon_times(
        self,
        lat: float,
        lng: float,
        in_utc: bool = False,
        tz: Optional[tzinfo] = None,
    ) -> MoonTimes:
        """Find moonrise and moonset during the day containing this instant.

        The day starts at UTC midnight when *in_utc* is true, otherwise at
        midnight in *tz* (default: the instant's own time zone).  Returned
        instants are UTC.
        """

        zone = UTC if in_utc else (tz or self.date.tzinfo)
        start_ms = julian.epoch_milliseconds(_midnight(self.date, zone))

        hours = np.arange(25)
        days = julian.milliseconds_to_julian(start_ms + hours * julian.DAY_MS / 24) - julian.J2000
        with np.errstate(invalid="ignore"):
            _, _, h = _moon_horizontal(days, lat, lng)

        rise, set_, ye = find_rise_set(h - MOON_HORIZON_OFFSET)

        def _at(offset_hours: Optional[float]) -> Optional[datetime]:
            if offset_hours is None:
                return None
            return julian.from_milliseconds(start_ms + offset_hours * julian.DAY_MS / 24)

        circumpolar = rise is None and set_ is None
        result = MoonTimes(
            rise=_at(rise),
            set=_at(set_),
            always_up=circumpolar and ye > 0,
            always_down=circumpolar and not ye > 0,
        )
        LOGGER.debug(
            json.dumps(
                {
                    "event": "moon_times",
                    "lat": lat,
                    "lng": lng,
                    "rise": result.rise.isoformat() if result.rise else None,
                    "set": result.set.isoformat() if result.set else None,
                    "always_up": result.always_up,
                    "always_down": result.always_down,
                }
            )
        )
        return result
