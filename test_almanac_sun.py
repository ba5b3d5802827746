#!/usr/bin/env python3
"""
Tests for almanac_sun.py
Sun position, sunrise/sunset and twilight against Practical Astronomy With
Your Calculator and USNO tables, plus the position cache.
"""

import sys
import os
import math
import threading
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

# Add src directory to path to import almanac_sun
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from almanac_angles import parse_dms, parse_hms
from almanac_cache import PositionCache, cache_key
import almanac_sun
from almanac_models import GeographicCoordinate, InvalidInputError, Visibility
from almanac_sun import (
    ASTRONOMICAL_TWILIGHT, CIVIL_TWILIGHT, NAUTICAL_TWILIGHT, SolarEphemeris
)


def _zone(hours):
    return timezone(timedelta(hours=hours))


def _hours(h, m):
    return h + m / 60.0


@pytest.fixture
def sun():
    return SolarEphemeris()


# ============================================================================
# Position
# ============================================================================

# From Practical Astronomy With Your Calculator 4th edition section 46
def test_equatorial_coordinate(sun):
    eq = sun.equatorial_coordinate(datetime(2003, 7, 27, tzinfo=timezone.utc))
    assert eq.right_ascension == pytest.approx(parse_hms("8:23:34"), abs=0.01)
    assert eq.declination == pytest.approx(parse_dms("19:21:10"), abs=0.01)


def test_ecliptic_longitude(sun):
    assert sun.ecliptic_longitude_at(datetime(2003, 7, 27, tzinfo=timezone.utc)) == \
        pytest.approx(123.580601, abs=1e-3)


def test_ecliptic_longitude_exactly_360_wraps_to_zero(sun, monkeypatch):
    monkeypatch.setattr(almanac_sun, 'ECLIPTIC_LONGITUDE_AT_EPOCH', 0.0)
    assert sun.ecliptic_longitude(0.0, 360.0) == 0.0


def test_ecliptic_longitude_range(sun):
    start = datetime(2019, 1, 1, tzinfo=timezone.utc)
    for day in range(0, 800, 3):
        longitude = sun.ecliptic_longitude_at(start + timedelta(days=day))
        assert 0.0 <= longitude < 360.0


def test_mean_anomaly_parameter_range(sun):
    for year in (1950, 1999, 2003, 2010, 2031):
        n = sun.mean_anomaly_parameter(datetime(year, 5, 1, tzinfo=timezone.utc))
        assert 0.0 <= n < 360.0


def test_mean_anomaly_wraps_negative(sun):
    assert sun.mean_anomaly(0.0) == pytest.approx(360.0 + 279.557208 - 283.112438)
    assert sun.mean_anomaly(10.0) == pytest.approx(10.0 + 279.557208 - 283.112438)


def test_declination_tracks_the_seasons(sun):
    june = sun.equatorial_coordinate(datetime(2019, 6, 21, 12, tzinfo=timezone.utc))
    december = sun.equatorial_coordinate(datetime(2019, 12, 22, 12, tzinfo=timezone.utc))
    assert june.declination == pytest.approx(23.44, abs=0.1)
    assert december.declination == pytest.approx(-23.44, abs=0.1)


# ============================================================================
# Rise / Set
# ============================================================================

# From Practical Astronomy With Your Calculator 4th edition section 49
def test_rise_and_set_time_boston(sun):
    boston = GeographicCoordinate(42.37, -71.05)
    rise_set = sun.rise_and_set_time(boston, datetime(1986, 3, 10, tzinfo=_zone(-5)))
    assert rise_set.rise_time == pytest.approx(_hours(6, 6), abs=0.1)
    assert rise_set.set_time == pytest.approx(_hours(17, 43), abs=0.1)


# From the USNO rise/set table
def test_rise_and_set_time_usno(sun):
    geo = GeographicCoordinate(42.0, -80.0)
    rise_set = sun.rise_and_set_time(geo, datetime(2018, 4, 9, tzinfo=_zone(-4)))
    assert rise_set.rise_time == pytest.approx(_hours(6, 49), abs=0.1)
    assert rise_set.set_time == pytest.approx(_hours(19, 55), abs=0.1)


def test_rise_and_set_time_grove_city(sun):
    geo = GeographicCoordinate(41.154, -80.079)
    rise_set = sun.rise_and_set_time(geo, datetime(2018, 4, 7, 21, 30, tzinfo=_zone(-4)))
    assert rise_set.rise_time == pytest.approx(_hours(6, 52), abs=0.1)
    assert rise_set.set_time == pytest.approx(_hours(19, 52), abs=0.1)


def test_rise_and_set_time_ignores_time_of_day(sun):
    geo = GeographicCoordinate(42.0, -80.0)
    morning = sun.rise_and_set_time(geo, datetime(2018, 4, 9, 1, tzinfo=_zone(-4)))
    evening = sun.rise_and_set_time(geo, datetime(2018, 4, 9, 23, tzinfo=_zone(-4)))
    assert morning == evening


def test_midnight_sun(sun):
    tromso = GeographicCoordinate(69.65, 18.96)
    rise_set = sun.rise_and_set_time(tromso, datetime(2019, 6, 21, tzinfo=_zone(2)))
    # the Sun stays up: cos(H) < -1 gives (NaN, 0)
    assert rise_set.visibility == Visibility.ALWAYS_VISIBLE
    assert math.isnan(rise_set.rise_time)
    assert rise_set.set_time == 0.0


def test_polar_night(sun):
    tromso = GeographicCoordinate(69.65, 18.96)
    rise_set = sun.rise_and_set_time(tromso, datetime(2019, 12, 21, tzinfo=_zone(1)))
    # the Sun stays down: cos(H) > 1 gives (0, NaN)
    assert rise_set.visibility == Visibility.NEVER_VISIBLE
    assert rise_set.rise_time == 0.0
    assert math.isnan(rise_set.set_time)


# ============================================================================
# Twilight
# ============================================================================

# From Practical Astronomy With Your Calculator 4th edition section 50
def test_twilight_duration(sun):
    geo = GeographicCoordinate(52.0, 0.0)
    duration = sun.twilight_duration(geo, datetime(1979, 9, 7, tzinfo=timezone.utc), 108.0)
    assert duration == pytest.approx(2.133411, abs=1e-4)


def test_twilight_default_is_astronomical(sun):
    geo = GeographicCoordinate(52.0, 0.0)
    instant = datetime(1979, 9, 7, tzinfo=timezone.utc)
    assert sun.twilight_duration(geo, instant) == sun.twilight_duration(geo, instant, ASTRONOMICAL_TWILIGHT)


def test_twilight_lengthens_with_depression(sun):
    geo = GeographicCoordinate(40.0, -75.0)
    instant = datetime(2020, 10, 1, tzinfo=_zone(-4))
    civil = sun.twilight_duration(geo, instant, CIVIL_TWILIGHT)
    nautical = sun.twilight_duration(geo, instant, NAUTICAL_TWILIGHT)
    astronomical = sun.twilight_duration(geo, instant, ASTRONOMICAL_TWILIGHT)
    assert 0.0 < civil < nautical < astronomical


def test_no_astronomical_twilight_end_in_high_summer(sun):
    # at 60N around the solstice the Sun never gets 18 degrees below the horizon
    geo = GeographicCoordinate(60.0, 10.0)
    assert math.isnan(sun.twilight_duration(geo, datetime(2020, 6, 21, tzinfo=_zone(2))))


def test_twilight_rejects_naive_datetime(sun):
    with pytest.raises(InvalidInputError):
        sun.twilight_duration(GeographicCoordinate(52.0, 0.0), datetime(1979, 9, 7))


# ============================================================================
# Cache
# ============================================================================

def test_cache_is_transparent(sun):
    instant = datetime(2003, 7, 27, 5, 30, tzinfo=timezone.utc)
    uncached = SolarEphemeris()._compute_equatorial_coordinate(instant)
    assert sun.equatorial_coordinate(instant) == uncached
    assert sun.equatorial_coordinate(instant) == uncached


def test_repeated_instant_is_computed_once(sun):
    instant = datetime(2003, 7, 27, 5, 30, tzinfo=timezone.utc)
    with mock.patch.object(sun, '_compute_equatorial_coordinate',
                           wraps=sun._compute_equatorial_coordinate) as compute:
        first = sun.equatorial_coordinate(instant)
        second = sun.equatorial_coordinate(instant)
        # the same instant expressed in another zone shares the key
        third = sun.equatorial_coordinate(instant.astimezone(_zone(-7)))

    assert compute.call_count == 1
    assert first is second is third
    assert instant in sun.cache
    assert len(sun.cache) == 1


def test_cache_key_truncates_to_whole_seconds():
    base = datetime(2020, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    assert cache_key(base) == cache_key(base + timedelta(microseconds=999999))
    assert cache_key(base) != cache_key(base + timedelta(seconds=1))
    assert cache_key(base - timedelta(microseconds=1)) == cache_key(base) - 1


def test_cache_first_value_wins():
    cache = PositionCache("test")
    instant = datetime(2020, 1, 1, tzinfo=timezone.utc)
    first = cache.get_or_compute(instant, lambda t: "first")
    second = cache.get_or_compute(instant, lambda t: "second")
    assert first == second == "first"


def test_cache_is_safe_across_threads(sun):
    instants = [datetime(2021, 3, 1, tzinfo=timezone.utc) + timedelta(minutes=10 * i)
                for i in range(50)]
    expected = [SolarEphemeris()._compute_equatorial_coordinate(t) for t in instants]
    results = {}

    def worker(index):
        results[index] = [sun.equatorial_coordinate(t) for t in instants]

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(sun.cache) == len(instants)
    for positions in results.values():
        assert positions == expected
