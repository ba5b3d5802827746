"""
Time System Module for the Almanac

This module provides the civil / Julian / sidereal time conversions:
- Julian Date of a zoned timestamp
- Greenwich and Local Sidereal Time
- Inverse conversions from sidereal time back to local civil hours
- Day counts since the 2010.0 epoch used by the Sun and Moon models

Every function takes a timezone-aware ``datetime``. The UTC offset matters:
sidereal time is computed from the UTC reading of the instant, while the
inverse conversion returns hours on the instant's own civil clock.
"""

import logging
from datetime import datetime, timezone

from almanac_angles import d2h, wrap
from almanac_models import GeographicCoordinate, InvalidInputError

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

JD_EPOCH_2000 = 2451545.0  # JD for 2000-01-01 12:00 UT
DAYS_PER_CENTURY = 36525.0
JD_CALENDAR_OFFSET = 1720994.5

# T0 polynomial coefficients (sidereal time at 0h UT)
GST_A = 6.697374558
GST_B = 2400.051336
GST_C = 0.000025862

SIDEREAL_RATE = 1.002737909           # sidereal hours per solar hour
INVERSE_SIDEREAL_RATE = 0.9972695663  # solar hours per sidereal hour

EPOCH_2010 = datetime(2010, 1, 1, tzinfo=timezone.utc)
SECONDS_PER_DAY = 86400.0


# ============================================================================
# Timestamp Helpers
# ============================================================================

def require_aware(instant: datetime) -> datetime:
    """
    Check that a timestamp carries a UTC offset.

    Raises:
        InvalidInputError: for naive datetimes or non-datetime values
    """
    if not isinstance(instant, datetime):
        raise InvalidInputError(f"expected a datetime, got {type(instant).__name__}")
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise InvalidInputError("datetime must be timezone-aware")
    return instant


def utc_offset_hours(instant: datetime) -> float:
    """UTC offset of the timestamp in decimal hours (east positive)."""
    return require_aware(instant).utcoffset().total_seconds() / 3600.0


def utc_midnight(instant: datetime) -> datetime:
    """0h UT on the instant's UTC date."""
    utc = require_aware(instant).astimezone(timezone.utc)
    return utc.replace(hour=0, minute=0, second=0, microsecond=0)


def local_noon(instant: datetime) -> datetime:
    """12h local civil time on the instant's civil date, same offset."""
    return require_aware(instant).replace(hour=12, minute=0, second=0, microsecond=0)


def _decimal_hours(dt: datetime) -> float:
    return (dt.hour + dt.minute / 60.0 + dt.second / 3600.0 +
            dt.microsecond / 3_600_000_000.0)


# ============================================================================
# Julian Date
# ============================================================================

def julian_date(instant: datetime) -> float:
    """
    Calculate the Julian Date of a zoned timestamp.

    Args:
        instant: Timezone-aware datetime

    Returns:
        Julian Date including the fraction of the day
    """
    utc = require_aware(instant).astimezone(timezone.utc)
    year = utc.year
    month = utc.month
    day = utc.day + _decimal_hours(utc) / 24.0

    # Treat January/February as months 13/14 of the previous year
    if month <= 2:
        year -= 1
        month += 12

    a = int(year / 100)
    b = 2 - a + int(a / 4)
    c = int(365.25 * year)
    d = int(30.6001 * (month + 1))

    return b + c + d + day + JD_CALENDAR_OFFSET


def julian_centuries(instant: datetime) -> float:
    """Julian centuries elapsed since J2000.0."""
    return (julian_date(instant) - JD_EPOCH_2000) / DAYS_PER_CENTURY


def days_since_epoch_2010(instant: datetime) -> float:
    """
    Days elapsed since epoch 2010.0 (2009-12-31 0h UT).

    Computed as the civil day of year plus the signed span from
    2010-01-01 0h UT to 1 January of the instant's year at the same
    wall-clock time, which carries the time of day and the UTC offset.
    """
    require_aware(instant)
    start_of_year = instant.replace(month=1, day=1)
    span = (start_of_year - EPOCH_2010).total_seconds() / SECONDS_PER_DAY
    return instant.timetuple().tm_yday + span


# ============================================================================
# Sidereal Time
# ============================================================================

def sidereal_time_at_midnight(instant: datetime) -> float:
    """
    Sidereal time T0 at 0h UT of the instant's UTC date.

    Returns:
        T0 in hours (0-24)
    """
    t = (julian_date(utc_midnight(instant)) - JD_EPOCH_2000) / DAYS_PER_CENTURY
    t0 = GST_A + GST_B * t + GST_C * t * t
    return wrap(t0, 24.0)


def greenwich_sidereal_time(instant: datetime) -> float:
    """
    Calculate Greenwich Sidereal Time.

    Args:
        instant: Timezone-aware datetime

    Returns:
        GST in hours (0-24)
    """
    t0 = sidereal_time_at_midnight(instant)
    ut_hours = _decimal_hours(instant.astimezone(timezone.utc))
    return wrap(ut_hours * SIDEREAL_RATE + t0, 24.0)


def local_sidereal_time(geo: GeographicCoordinate, instant: datetime) -> float:
    """
    Calculate Local Sidereal Time.

    Args:
        geo: Observer position; its longitude is added as longitude / 15
        instant: Timezone-aware datetime

    Returns:
        LST in hours (0-24)
    """
    return wrap(greenwich_sidereal_time(instant) + d2h(geo.longitude), 24.0)


def gst_from_lst(geo: GeographicCoordinate, lst: float) -> float:
    """Convert a Local Sidereal Time at ``geo`` to Greenwich Sidereal Time."""
    return wrap(lst - d2h(geo.longitude), 24.0)


def civil_hours_from_gst(instant: datetime, gst: float) -> float:
    """
    Convert a Greenwich Sidereal Time on the instant's date to local hours.

    Args:
        instant: Any timestamp on the wanted date; supplies the UTC date
            and the UTC offset of the result
        gst: Greenwich Sidereal Time in hours

    Returns:
        Local civil time in decimal hours (0-24)
    """
    t0 = sidereal_time_at_midnight(instant)
    ut_hours = wrap(gst - t0, 24.0) * INVERSE_SIDEREAL_RATE
    return wrap(ut_hours + utc_offset_hours(instant), 24.0)
