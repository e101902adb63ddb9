"""Low-order solar and lunar ephemerides and horizontal coordinate transforms.

Every function accepts plain floats or numpy arrays of day offsets from
J2000 and returns values of the same shape.  Arguments that fall outside the
domain of ``arcsin``/``arccos`` propagate as ``nan``; no clamping is applied.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

__all__ = [
    "EquatorialCoordinates",
    "MoonCoordinates",
    "OBLIQUITY_OF_EARTH",
    "altitude",
    "astro_refraction",
    "azimuth",
    "declination",
    "ecliptic_longitude",
    "moon_coords",
    "parallactic_angle",
    "right_ascension",
    "sidereal_time",
    "solar_mean_anomaly",
    "sun_coords",
]

RAD = math.pi / 180.0

OBLIQUITY_OF_EARTH = 23.4397 * RAD
PERIHELION_OF_EARTH = 102.9372 * RAD


@dataclass(frozen=True)
class EquatorialCoordinates:
    """Geocentric equatorial coordinates in radians."""

    right_ascension: float
    declination: float


@dataclass(frozen=True)
class MoonCoordinates(EquatorialCoordinates):
    distance: float  # km


def right_ascension(l, b):
    """Right ascension for ecliptic longitude *l* and latitude *b*."""

    return np.arctan2(
        np.sin(l) * math.cos(OBLIQUITY_OF_EARTH) - np.tan(b) * math.sin(OBLIQUITY_OF_EARTH),
        np.cos(l),
    )


def declination(l, b):
    """Declination for ecliptic longitude *l* and latitude *b*."""

    return np.arcsin(
        np.sin(b) * math.cos(OBLIQUITY_OF_EARTH)
        + np.cos(b) * math.sin(OBLIQUITY_OF_EARTH) * np.sin(l)
    )


def sidereal_time(days, lw):
    """Local sidereal time; *lw* is the west longitude in radians."""

    return RAD * (280.16 + 360.9856235 * np.asarray(days)) - lw


def azimuth(hour_angle, phi, dec):
    return np.arctan2(
        np.sin(hour_angle),
        np.cos(hour_angle) * np.sin(phi) - np.tan(dec) * np.cos(phi),
    )


def altitude(hour_angle, phi, dec):
    return np.arcsin(
        np.sin(phi) * np.sin(dec) + np.cos(phi) * np.cos(dec) * np.cos(hour_angle)
    )


def parallactic_angle(hour_angle, phi, dec):
    # Meeus, Astronomical Algorithms (2nd ed.), formula 14.1.
    return np.arctan2(
        np.sin(hour_angle),
        np.tan(phi) * np.cos(dec) - np.sin(dec) * np.cos(hour_angle),
    )


def astro_refraction(h):
    """Refraction correction in radians for an apparent altitude *h*.

    Meeus formula 16.4.  Negative altitudes are treated as zero, the formula
    is singular at ``h = -0.08901179``.
    """

    h = np.maximum(h, 0.0)
    return 0.0002967 / np.tan(h + 0.00312536 / (h + 0.08901179))


def solar_mean_anomaly(days):
    return RAD * (357.5291 + 0.98560028 * np.asarray(days))


def ecliptic_longitude(mean_anomaly):
    equation_of_center = RAD * (
        1.9148 * np.sin(mean_anomaly)
        + 0.02 * np.sin(2 * mean_anomaly)
        + 0.0003 * np.sin(3 * mean_anomaly)
    )
    return mean_anomaly + equation_of_center + PERIHELION_OF_EARTH + math.pi


def sun_coords(days) -> EquatorialCoordinates:
    mean_anomaly = solar_mean_anomaly(days)
    longitude = ecliptic_longitude(mean_anomaly)
    return EquatorialCoordinates(
        right_ascension=right_ascension(longitude, 0.0),
        declination=declination(longitude, 0.0),
    )


def moon_coords(days) -> MoonCoordinates:
    """Geocentric ecliptic position of the moon converted to equatorial."""

    days = np.asarray(days)
    mean_longitude = RAD * (218.316 + 13.176396 * days)
    mean_anomaly = RAD * (134.963 + 13.064993 * days)
    mean_distance = RAD * (93.272 + 13.22935 * days)

    longitude = mean_longitude + RAD * 6.289 * np.sin(mean_anomaly)
    latitude = RAD * 5.128 * np.sin(mean_distance)
    distance = 385001 - 20905 * np.cos(mean_anomaly)

    return MoonCoordinates(
        right_ascension=right_ascension(longitude, latitude),
        declination=declination(longitude, latitude),
        distance=distance,
    )
