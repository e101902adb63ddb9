"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator


class InstantQuery(BaseModel):
    """Validated ``time`` query parameter shared by every endpoint."""

    time: Optional[datetime] = Field(
        None,
        description="Instant to compute for (ISO-8601). Naive values are UTC; defaults to now.",
    )

    @field_validator("time")
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class PositionQuery(InstantQuery):
    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class SolarTimesQuery(PositionQuery):
    height: float = Field(0.0, ge=0.0, description="Observer height above the horizon in meters")


class MoonTimesQuery(PositionQuery):
    utc: bool = Field(False, description="Search the UTC day instead of the local day")
    tz: Optional[str] = Field(
        None,
        description="IANA time zone defining the local day; defaults to the zone of 'time'. Not allowed with utc",
    )

    @field_validator("tz")
    def validate_tz(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value}") from exc
        return value

    @model_validator(mode="after")
    def check_day_selector(self) -> "MoonTimesQuery":
        if self.utc and self.tz is not None:
            raise ValueError("'tz' cannot be combined with 'utc'")
        return self


class SunPositionResponse(BaseModel):
    ok: bool = True
    time_utc: str = Field(..., description="Instant of the computation (ISO-8601)")
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Azimuth in radians, measured from south towards west")
    altitude: float = Field(..., description="Altitude above the horizon in radians")


class SolarTimesResponse(BaseModel):
    ok: bool = True
    time_utc: str
    latitude: float
    longitude: float
    height_m: float
    times: Dict[str, Optional[str]] = Field(
        ...,
        description="Phase name to UTC instant; null when the sun never reaches the angle",
    )


class MoonPositionResponse(SunPositionResponse):
    distance_km: float = Field(..., description="Geocentric distance to the moon")
    parallactic_angle: float = Field(..., description="Parallactic angle in radians")


class MoonIlluminationResponse(BaseModel):
    ok: bool = True
    time_utc: str
    fraction: float = Field(..., ge=0.0, le=1.0, description="Illuminated fraction of the disc")
    phase: float = Field(..., description="0 new moon, 0.25 first quarter, 0.5 full, 0.75 last quarter")
    angle: float = Field(..., description="Midpoint angle of the bright limb in radians")


class MoonTimesResponse(BaseModel):
    ok: bool = True
    time_utc: str
    latitude: float
    longitude: float
    rise_utc: Optional[str] = Field(None, description="Moonrise in UTC (ISO-8601)")
    set_utc: Optional[str] = Field(None, description="Moonset in UTC (ISO-8601)")
    always_up: bool
    always_down: bool


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    twilight_angles: List[str]


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
