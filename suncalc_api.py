"""FastAPI application exposing sun and moon computations."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse,
    HealthResponse,
    InstantQuery,
    MoonIlluminationResponse,
    MoonPositionResponse,
    MoonTimesQuery,
    MoonTimesResponse,
    PositionQuery,
    SolarTimesQuery,
    SolarTimesResponse,
    SunPositionResponse,
)
from suncalc import SunCalc, get_twilight_angles
from suncalc.config import TwilightConfigError, configure_twilight_angles, cors_origins, log_level

logging.basicConfig(level=log_level(), format="%(message)s")
LOGGER = logging.getLogger("suncalc-api")

APP_DESCRIPTION = (
    "Sun and moon positions, twilight phases, moon illumination and moon rise/set"
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        table = configure_twilight_angles()
    except TwilightConfigError as exc:
        LOGGER.error(json.dumps({"event": "twilight_config_failed", "error": str(exc)}))
        raise
    LOGGER.info(json.dumps({"event": "startup", "twilight_angles": len(table)}))
    yield


app = FastAPI(
    title="SunCalc API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _instant(params: InstantQuery) -> datetime:
    return params.time if params.time is not None else datetime.now(UTC)


def _log_request(event: str, start_time: float, **fields: object) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps({"event": event, **fields, "duration_ms": round(duration_ms, 3)})
    )


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, twilight_angles=get_twilight_angles().names())


@app.get("/sun/position", response_model=SunPositionResponse, responses=ERROR_RESPONSES)
def sun_position(params: Annotated[PositionQuery, Query()]) -> SunPositionResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    position = SunCalc(instant).get_solar_position(params.lat, params.lng)
    _log_request("sun_position", start_time, lat=params.lat, lng=params.lng)
    return SunPositionResponse(
        time_utc=_format_utc(instant),
        latitude=params.lat,
        longitude=params.lng,
        azimuth=position.azimuth,
        altitude=position.altitude,
    )


@app.get("/sun/times", response_model=SolarTimesResponse, responses=ERROR_RESPONSES)
def sun_times(params: Annotated[SolarTimesQuery, Query()]) -> SolarTimesResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    try:
        times = SunCalc(instant).get_solar_times(params.lat, params.lng, params.height)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    missing = sorted(name for name, value in times.items() if value is None)
    _log_request(
        "sun_times",
        start_time,
        lat=params.lat,
        lng=params.lng,
        height=params.height,
        not_reached=missing,
    )
    return SolarTimesResponse(
        time_utc=_format_utc(instant),
        latitude=params.lat,
        longitude=params.lng,
        height_m=params.height,
        times={name: _format_utc(value) for name, value in times.items()},
    )


@app.get("/moon/position", response_model=MoonPositionResponse, responses=ERROR_RESPONSES)
def moon_position(params: Annotated[PositionQuery, Query()]) -> MoonPositionResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    position = SunCalc(instant).get_moon_position(params.lat, params.lng)
    _log_request("moon_position", start_time, lat=params.lat, lng=params.lng)
    return MoonPositionResponse(
        time_utc=_format_utc(instant),
        latitude=params.lat,
        longitude=params.lng,
        azimuth=position.azimuth,
        altitude=position.altitude,
        distance_km=position.distance,
        parallactic_angle=position.parallactic_angle,
    )


@app.get(
    "/moon/illumination", response_model=MoonIlluminationResponse, responses=ERROR_RESPONSES
)
def moon_illumination(params: Annotated[InstantQuery, Query()]) -> MoonIlluminationResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    illumination = SunCalc(instant).get_moon_illumination()
    _log_request("moon_illumination", start_time, phase=round(illumination.phase, 4))
    return MoonIlluminationResponse(
        time_utc=_format_utc(instant),
        fraction=illumination.fraction,
        phase=illumination.phase,
        angle=illumination.angle,
    )


@app.get("/moon/times", response_model=MoonTimesResponse, responses=ERROR_RESPONSES)
def moon_times(params: Annotated[MoonTimesQuery, Query()]) -> MoonTimesResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    zone = ZoneInfo(params.tz) if params.tz else None
    try:
        result = SunCalc(instant).get_moon_times(
            params.lat, params.lng, in_utc=params.utc, tz=zone
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    _log_request(
        "moon_times",
        start_time,
        lat=params.lat,
        lng=params.lng,
        utc=params.utc,
        tz=params.tz,
        always_up=result.always_up,
        always_down=result.always_down,
    )
    return MoonTimesResponse(
        time_utc=_format_utc(instant),
        latitude=params.lat,
        longitude=params.lng,
        rise_utc=_format_utc(result.rise),
        set_utc=_format_utc(result.set),
        always_up=result.always_up,
        always_down=result.always_down,
    )
