"""Conversions between absolute instants and Julian days."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

import numpy as np

__all__ = [
    "DAY_MS",
    "J1970",
    "J2000",
    "epoch_milliseconds",
    "from_julian",
    "from_milliseconds",
    "milliseconds_to_julian",
    "to_days",
    "to_julian",
]

DAY_MS = 1000 * 60 * 60 * 24

J1970 = 2440588  # Julian day of the Unix epoch at noon.
J2000 = 2451545

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def epoch_milliseconds(instant: datetime) -> float:
    """Return milliseconds elapsed since the Unix epoch for an aware datetime."""

    if instant.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return (instant - _EPOCH) / _ONE_MS


def milliseconds_to_julian(ms):
    """Julian day for epoch milliseconds; accepts floats or numpy arrays."""

    return np.divide(ms, DAY_MS) - 0.5 + J1970


def from_milliseconds(ms: float) -> datetime:
    """Build a UTC datetime from epoch milliseconds, rounded to the millisecond."""

    ms = float(ms)
    if not math.isfinite(ms):
        raise ValueError(f"cannot convert non-finite value to an instant: {ms}")
    return _EPOCH + timedelta(milliseconds=round(ms))


def to_julian(instant: datetime) -> float:
    return float(milliseconds_to_julian(epoch_milliseconds(instant)))


def from_julian(julian: float) -> datetime:
    return from_milliseconds((julian + 0.5 - J1970) * DAY_MS)


def to_days(instant: datetime) -> float:
    """Days elapsed since the J2000 epoch."""

    return to_julian(instant) - J2000
