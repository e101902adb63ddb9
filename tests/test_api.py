from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Iterable

import pytest
from fastapi.testclient import TestClient

from suncalc_api import app

TIME = "2013-03-05T00:00:00Z"
LOCATION = {"lat": 50.5, "lng": 30.5}


@pytest.fixture
def api_client() -> Iterable[TestClient]:
    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert "sunrise" in payload["twilight_angles"]
    assert "goldenHour" in payload["twilight_angles"]


def test_sun_position(api_client: TestClient) -> None:
    response = api_client.get("/sun/position", params={**LOCATION, "time": TIME})
    assert response.status_code == 200
    payload = response.json()
    assert payload["time_utc"] == "2013-03-05T00:00:00Z"
    assert payload["azimuth"] == pytest.approx(-2.5003175907168385, abs=1e-6)
    assert payload["altitude"] == pytest.approx(-0.7000406838781611, abs=1e-6)


def test_sun_times(api_client: TestClient) -> None:
    response = api_client.get("/sun/times", params={**LOCATION, "time": TIME, "height": 2000})
    assert response.status_code == 200
    times = response.json()["times"]
    assert times["solarNoon"].startswith("2013-03-05T10:10:57")
    assert times["sunrise"].startswith("2013-03-05T04:25:07")
    assert times["sunset"].startswith("2013-03-05T15:56:46")
    assert times["sunset"].endswith("Z")


def test_sun_times_polar_day_returns_null(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun/times", params={"lat": 78.2232, "lng": 15.6469, "time": "2025-06-21T00:00:00Z"}
    )
    assert response.status_code == 200
    times = response.json()["times"]
    assert times["sunrise"] is None
    assert times["solarNoon"] is not None


def test_naive_time_is_treated_as_utc(api_client: TestClient) -> None:
    response = api_client.get("/sun/position", params={**LOCATION, "time": "2013-03-05T00:00:00"})
    assert response.status_code == 200
    assert response.json()["time_utc"] == "2013-03-05T00:00:00Z"


def test_moon_position(api_client: TestClient) -> None:
    response = api_client.get("/moon/position", params={**LOCATION, "time": TIME})
    assert response.status_code == 200
    payload = response.json()
    assert payload["altitude"] == pytest.approx(0.014551482243892251, abs=1e-6)
    assert payload["distance_km"] == pytest.approx(364121.37256256194, abs=1e-3)


def test_moon_illumination(api_client: TestClient) -> None:
    response = api_client.get("/moon/illumination", params={"time": TIME})
    assert response.status_code == 200
    payload = response.json()
    assert payload["fraction"] == pytest.approx(0.4848068202456373, abs=1e-6)
    assert payload["phase"] == pytest.approx(0.7548368838538762, abs=1e-6)


def test_moon_times(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon/times", params={**LOCATION, "time": "2013-03-04T00:00:00Z", "utc": True}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["rise_utc"].startswith("2013-03-04T23:54:29")
    assert payload["set_utc"].startswith("2013-03-04T07:47:58")
    assert payload["always_up"] is False
    assert payload["always_down"] is False


def test_moon_times_with_time_zone(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon/times", params={**LOCATION, "time": "2013-03-04T12:00:00Z", "tz": "Europe/Berlin"}
    )
    assert response.status_code == 200
    payload = response.json()

    # 2013-03-04 00:00 in Berlin (CET, UTC+1).
    midnight = datetime(2013, 3, 3, 23, tzinfo=UTC)
    events = [payload["rise_utc"], payload["set_utc"]]
    assert any(event is not None for event in events)
    for event in events:
        if event is not None:
            assert midnight <= datetime.fromisoformat(event) <= midnight + timedelta(hours=24)


def test_moon_times_rejects_tz_with_utc(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon/times", params={**LOCATION, "utc": True, "tz": "Europe/Berlin"}
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/sun/position", params={"lat": 95, "lng": 0})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_unknown_time_zone(api_client: TestClient) -> None:
    response = api_client.get("/moon/times", params={**LOCATION, "tz": "Mars/Olympus_Mons"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
