from __future__ import annotations

from datetime import UTC, datetime

import pytest

from suncalc import DEFAULT_TWILIGHT_ANGLES, SunCalc, get_twilight_angles

DATE = datetime(2013, 3, 5, tzinfo=UTC)
LAT = 50.5
LNG = 30.5


def _second(dt: datetime) -> str:
    return dt.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def test_solar_position():
    position = SunCalc(DATE).get_solar_position(LAT, LNG)

    assert position.azimuth == pytest.approx(-2.5003175907168385, abs=1e-6)
    assert position.altitude == pytest.approx(-0.7000406838781611, abs=1e-6)


def test_solar_times_default_phases():
    expected = {
        "solarNoon": "2013-03-05T10:10:57Z",
        "nadir": "2013-03-04T22:10:57Z",
        "sunrise": "2013-03-05T04:34:56Z",
        "sunset": "2013-03-05T15:46:57Z",
        "sunriseEnd": "2013-03-05T04:38:19Z",
        "sunsetStart": "2013-03-05T15:43:34Z",
        "dawn": "2013-03-05T04:02:17Z",
        "dusk": "2013-03-05T16:19:36Z",
        "nauticalDawn": "2013-03-05T03:24:31Z",
        "nauticalDusk": "2013-03-05T16:57:22Z",
        "nightEnd": "2013-03-05T02:46:17Z",
        "night": "2013-03-05T17:35:36Z",
        "goldenHourEnd": "2013-03-05T05:19:01Z",
        "goldenHour": "2013-03-05T15:02:52Z",
    }

    times = SunCalc(DATE).get_solar_times(LAT, LNG)

    assert set(times) == set(expected)
    for name, value in expected.items():
        assert _second(times[name]) == value, name


def test_solar_times_with_observer_height():
    times = SunCalc(DATE).get_solar_times(LAT, LNG, 2000)

    assert _second(times["solarNoon"]) == "2013-03-05T10:10:57Z"
    assert _second(times["nadir"]) == "2013-03-04T22:10:57Z"
    assert _second(times["sunrise"]) == "2013-03-05T04:25:07Z"
    assert _second(times["sunset"]) == "2013-03-05T15:56:46Z"


def test_height_widens_day_monotonically():
    calc = SunCalc(DATE)
    results = [calc.get_solar_times(LAT, LNG, height) for height in (0, 10, 100, 1000, 2000)]

    sunrises = [times["sunrise"] for times in results]
    sunsets = [times["sunset"] for times in results]
    assert sunrises == sorted(sunrises, reverse=True)
    assert sunsets == sorted(sunsets)
    assert len(set(sunrises)) == len(sunrises)


def test_negative_height_rejected():
    with pytest.raises(ValueError):
        SunCalc(DATE).get_solar_times(LAT, LNG, -1)


def test_naive_datetime_rejected():
    with pytest.raises(ValueError):
        SunCalc(datetime(2013, 3, 5))


def test_rise_and_set_mirror_solar_noon():
    times = SunCalc(DATE).get_solar_times(LAT, LNG)
    noon = times["solarNoon"]

    for entry in DEFAULT_TWILIGHT_ANGLES:
        before = noon - times[entry.morning_name]
        after = times[entry.evening_name] - noon
        assert abs((before - after).total_seconds()) <= 0.002, entry


def test_polar_day_svalbard():
    times = SunCalc(datetime(2025, 6, 21, tzinfo=UTC)).get_solar_times(78.2232, 15.6469)

    assert times["solarNoon"] is not None
    assert times["nadir"] is not None
    for name in DEFAULT_TWILIGHT_ANGLES.names():
        assert times[name] is None, name


def test_polar_night_svalbard():
    times = SunCalc(datetime(2025, 12, 21, tzinfo=UTC)).get_solar_times(78.2232, 15.6469)

    assert times["sunrise"] is None
    assert times["sunset"] is None
    assert times["goldenHour"] is None
    # Astronomical twilight still reaches 78N at the winter solstice.
    assert times["nightEnd"] is not None
    assert times["nightEnd"] < times["solarNoon"] < times["night"]


def test_added_twilight_angle_is_returned():
    SunCalc.add_twilight_angle(-4, "blueHourStart", "blueHourEnd")

    times = SunCalc(DATE).get_solar_times(LAT, LNG)

    assert len(get_twilight_angles()) == len(DEFAULT_TWILIGHT_ANGLES) + 1
    assert times["dawn"] < times["blueHourStart"] < times["sunrise"]
    assert times["sunset"] < times["blueHourEnd"] < times["dusk"]


def test_explicit_table_leaves_process_table_untouched():
    table = DEFAULT_TWILIGHT_ANGLES.add(-4, "blueHourStart", "blueHourEnd")

    with_extra = SunCalc(DATE).get_solar_times(LAT, LNG, angles=table)
    default = SunCalc(DATE).get_solar_times(LAT, LNG)

    assert "blueHourStart" in with_extra
    assert "blueHourStart" not in default
    assert get_twilight_angles() is DEFAULT_TWILIGHT_ANGLES
    assert with_extra["sunrise"] == default["sunrise"]
