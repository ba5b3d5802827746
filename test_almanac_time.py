#!/usr/bin/env python3
"""
Tests for almanac_time.py
Julian Date, sidereal time and the inverse conversions, checked against
worked examples from Practical Astronomy With Your Calculator and the USNO
sidereal time calculator
"""

import sys
import os
from datetime import datetime, timedelta, timezone

import pytest

# Add src directory to path to import almanac_time
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from almanac_models import GeographicCoordinate, InvalidInputError
from almanac_time import (
    civil_hours_from_gst,
    days_since_epoch_2010,
    greenwich_sidereal_time,
    gst_from_lst,
    julian_date,
    local_sidereal_time,
    local_noon,
    require_aware,
    sidereal_time_at_midnight,
    utc_midnight,
    utc_offset_hours,
)


EST = timezone(timedelta(hours=-5))
EDT = timezone(timedelta(hours=-4))
DEFAULT_LOCATION = GeographicCoordinate(41.8125, -80.0935)

MIDNIGHT_JANUARY_2017 = datetime(2017, 1, 1, 0, 0, 0, tzinfo=EST)
NOON_JULY_4_2019 = datetime(2019, 7, 4, 12, 0, 0, tzinfo=EDT)


def test_julian_date_midnight_utc():
    assert julian_date(datetime(2015, 1, 1, tzinfo=timezone.utc)) == pytest.approx(2457023.5, abs=1e-9)


def test_julian_date_uses_utc_reading():
    # local midnight in New York is 05:00 UT
    assert julian_date(MIDNIGHT_JANUARY_2017) == pytest.approx(2457754.5 + 5.0 / 24.0, abs=1e-6)


def test_julian_date_j2000():
    assert julian_date(datetime(2000, 1, 1, 12, tzinfo=timezone.utc)) == pytest.approx(2451545.0, abs=1e-9)


def test_julian_date_january_and_february_roll_back():
    # Jan/Feb are counted as months 13/14 of the previous year
    feb_28 = julian_date(datetime(2019, 2, 28, tzinfo=timezone.utc))
    mar_1 = julian_date(datetime(2019, 3, 1, tzinfo=timezone.utc))
    assert mar_1 - feb_28 == pytest.approx(1.0, abs=1e-9)


def test_julian_date_leap_day():
    feb_29 = julian_date(datetime(2020, 2, 29, tzinfo=timezone.utc))
    mar_1 = julian_date(datetime(2020, 3, 1, tzinfo=timezone.utc))
    assert mar_1 - feb_29 == pytest.approx(1.0, abs=1e-9)


def test_greenwich_sidereal_time_january_2017():
    assert greenwich_sidereal_time(MIDNIGHT_JANUARY_2017) == pytest.approx(11.736219, abs=1e-3)


def test_greenwich_sidereal_time_july_2019():
    assert greenwich_sidereal_time(NOON_JULY_4_2019) == pytest.approx(10.8251156111, abs=1e-3)


def test_local_sidereal_time_january_2017():
    assert local_sidereal_time(DEFAULT_LOCATION, MIDNIGHT_JANUARY_2017) == pytest.approx(6.3966523333, abs=1e-3)


def test_local_sidereal_time_july_2019():
    assert local_sidereal_time(DEFAULT_LOCATION, NOON_JULY_4_2019) == pytest.approx(5.485548944, abs=1e-3)


def test_longitude_is_added_to_gst():
    # 15 degrees of longitude is one sidereal hour; positive values are East
    instant = datetime(2000, 1, 1, 12, tzinfo=timezone.utc)
    gst = greenwich_sidereal_time(instant)
    east = local_sidereal_time(GeographicCoordinate(0.0, 15.0), instant)
    west = local_sidereal_time(GeographicCoordinate(0.0, -15.0), instant)
    assert east == pytest.approx((gst + 1.0) % 24.0, abs=1e-9)
    assert west == pytest.approx((gst - 1.0) % 24.0, abs=1e-9)


def test_sidereal_time_at_j2000_midnight():
    t0 = sidereal_time_at_midnight(datetime(2000, 1, 1, 18, tzinfo=timezone.utc))
    # t is half a day before J2000.0 at 0h UT
    assert t0 == pytest.approx(6.6645, abs=1e-3)


# From Practical Astronomy With Your Calculator 4th edition section 15
def test_gst_from_lst():
    geo = GeographicCoordinate(0.0, -64.0)
    assert gst_from_lst(geo, 0.401453) == pytest.approx(4.668119, abs=1e-4)


# From Practical Astronomy With Your Calculator 4th edition section 13
def test_civil_hours_from_gst_utc():
    instant = datetime(1980, 4, 22, tzinfo=timezone.utc)
    assert civil_hours_from_gst(instant, 4.668119) == pytest.approx(14.614353, abs=1e-4)


def test_civil_hours_from_gst_applies_utc_offset():
    instant = datetime(1980, 4, 22, tzinfo=EDT)
    assert civil_hours_from_gst(instant, 4.668119) == pytest.approx(10.614353, abs=1e-4)


@pytest.mark.parametrize("instant", [
    datetime(1979, 9, 7, tzinfo=timezone.utc),
    datetime(2003, 9, 1, 23, 59, 59, tzinfo=timezone.utc),
    datetime(2015, 1, 1, tzinfo=EST),
    datetime(2019, 7, 4, 12, tzinfo=EDT),
    datetime(2024, 2, 29, 6, 30, tzinfo=timezone(timedelta(hours=9, minutes=30))),
])
@pytest.mark.parametrize("longitude", [-179.5, -80.0935, 0.0, 64.0, 179.5])
def test_lst_round_trip(instant, longitude):
    geo = GeographicCoordinate(10.0, longitude)
    lst_hours = local_sidereal_time(geo, instant)
    recovered = gst_from_lst(geo, lst_hours)
    gst = greenwich_sidereal_time(instant)
    diff = abs(recovered - gst)
    assert min(diff, 24.0 - diff) < 1e-6
    assert 0.0 <= lst_hours < 24.0
    assert 0.0 <= recovered < 24.0


def test_days_since_epoch_2010_book_example():
    # Practical Astronomy With Your Calculator section 46: D = -2349
    assert days_since_epoch_2010(datetime(2003, 7, 27, tzinfo=timezone.utc)) == pytest.approx(-2349.0, abs=1e-9)


def test_days_since_epoch_2010_counts_partial_day():
    assert days_since_epoch_2010(datetime(2010, 1, 1, tzinfo=timezone.utc)) == pytest.approx(1.0)
    assert days_since_epoch_2010(datetime(2010, 1, 1, 12, tzinfo=timezone.utc)) == pytest.approx(1.5)


def test_days_since_epoch_2010_uses_utc_offset():
    local = datetime(2010, 1, 1, 0, tzinfo=EST)
    assert days_since_epoch_2010(local) == pytest.approx(1.0 + 5.0 / 24.0)


def test_timestamp_helpers():
    instant = datetime(2018, 4, 10, 23, 30, tzinfo=EDT)
    assert utc_offset_hours(instant) == -4.0
    assert utc_midnight(instant) == datetime(2018, 4, 11, tzinfo=timezone.utc)
    assert local_noon(instant) == datetime(2018, 4, 10, 12, tzinfo=EDT)


@pytest.mark.parametrize("bad", [datetime(2018, 4, 10), "2018-04-10", 2458218.5, None])
def test_rejects_naive_or_non_datetime(bad):
    with pytest.raises(InvalidInputError):
        require_aware(bad)
    with pytest.raises(InvalidInputError):
        julian_date(bad)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        greenwich_sidereal_time(datetime(2018, 4, 10))
