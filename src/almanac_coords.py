"""
Coordinate Transformation Module for the Almanac

This module provides the spherical-astronomy transforms:
- Hour angle and equatorial -> horizon conversion
- Obliquity of the ecliptic and ecliptic -> equatorial conversion
- Rise/set time solving for any equatorial position
- Time-series sampling of an object's path across the sky
- Angular separation between two positions
"""

import math
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterator

import numpy as np

from almanac_angles import (
    DEG_TO_RAD, RAD_TO_DEG, d2h, d2r, h2r, r2d, r2h, wrap
)
from almanac_models import (
    EclipticCoordinate, EquatorialCoordinate, GeographicCoordinate,
    HorizonCoordinate, InvalidInputError, RiseAndSetTime, Visibility
)
from almanac_time import (
    DAYS_PER_CENTURY, JD_EPOCH_2000, civil_hours_from_gst, gst_from_lst,
    julian_date, local_sidereal_time, require_aware
)

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

STANDARD_REFRACTION = 34.0 / 60.0  # degrees, refraction at the horizon
DEFAULT_SAMPLE_COUNT = 1500

# Obliquity of the ecliptic at J2000 and its secular terms (arcseconds)
OBLIQUITY_J2000 = 23.439292
OBLIQUITY_T1 = 46.815
OBLIQUITY_T2 = 0.0006
OBLIQUITY_T3 = 0.0018


def _clamp_unit(value: float) -> float:
    # Handle numerical errors before asin/acos
    if value > 1.0:
        return 1.0
    if value < -1.0:
        return -1.0
    return value


# ============================================================================
# Equatorial <-> Horizon
# ============================================================================

def hour_angle(eq: EquatorialCoordinate, geo: GeographicCoordinate,
               instant: datetime) -> float:
    """
    Calculate the hour angle of a position.

    Args:
        eq: Equatorial position
        geo: Observer position
        instant: Timezone-aware datetime

    Returns:
        Hour angle in hours (0-24), measured west of the meridian
    """
    lst_hours = local_sidereal_time(geo, instant)
    return wrap(lst_hours - d2h(eq.right_ascension), 24.0)


def equatorial_to_horizon(eq: EquatorialCoordinate, geo: GeographicCoordinate,
                          instant: datetime) -> HorizonCoordinate:
    """
    Convert an equatorial position to azimuth/altitude for one observer.

    Args:
        eq: Equatorial position
        geo: Observer position
        instant: Timezone-aware datetime

    Returns:
        HorizonCoordinate with azimuth in [0, 360)
    """
    dec_rad = d2r(eq.declination)
    lat_rad = d2r(geo.latitude)
    ha_rad = h2r(hour_angle(eq, geo, instant))

    sin_alt = (math.sin(dec_rad) * math.sin(lat_rad) +
               math.cos(dec_rad) * math.cos(lat_rad) * math.cos(ha_rad))
    alt_rad = math.asin(_clamp_unit(sin_alt))

    cos_az = ((math.sin(dec_rad) - math.sin(lat_rad) * math.sin(alt_rad)) /
              (math.cos(lat_rad) * math.cos(alt_rad)))
    az_rad = math.acos(_clamp_unit(cos_az))

    # acos only covers 0-180; west of the meridian the azimuth is mirrored
    if math.sin(ha_rad) > 0:
        az_rad = 2.0 * math.pi - az_rad

    return HorizonCoordinate(wrap(r2d(az_rad), 360.0), r2d(alt_rad))


# ============================================================================
# Ecliptic -> Equatorial
# ============================================================================

def ecliptic_obliquity(instant: datetime) -> float:
    """
    Calculate the obliquity of the ecliptic.

    Args:
        instant: Timezone-aware datetime

    Returns:
        Obliquity in degrees
    """
    t = (julian_date(instant) - JD_EPOCH_2000) / DAYS_PER_CENTURY
    de = (OBLIQUITY_T1 * t + OBLIQUITY_T2 * t ** 2 - OBLIQUITY_T3 * t ** 3) / 3600.0
    return OBLIQUITY_J2000 - de


def ecliptic_to_equatorial(ecl: EclipticCoordinate,
                           instant: datetime) -> EquatorialCoordinate:
    """
    Convert ecliptic latitude/longitude to right ascension/declination.

    Args:
        ecl: Ecliptic position in degrees
        instant: Timezone-aware datetime, used for the obliquity

    Returns:
        EquatorialCoordinate with right ascension in [0, 360)
    """
    lam = d2r(ecl.longitude)
    beta = d2r(ecl.latitude)
    eps = d2r(ecliptic_obliquity(instant))

    sin_dec = (math.sin(beta) * math.cos(eps) +
               math.cos(beta) * math.sin(eps) * math.sin(lam))
    dec = r2d(math.asin(_clamp_unit(sin_dec)))

    y = math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps)
    x = math.cos(lam)
    ra = wrap(r2d(math.atan2(y, x)), 360.0)

    return EquatorialCoordinate(ra, dec)


# ============================================================================
# Rise/Set Time Calculations
# ============================================================================

def rise_and_set_time(eq: EquatorialCoordinate, geo: GeographicCoordinate,
                      instant: datetime,
                      vertical_shift: float = STANDARD_REFRACTION) -> RiseAndSetTime:
    """
    Calculate rise and set times of a position in local civil hours.

    Args:
        eq: Equatorial position
        geo: Observer position
        instant: Timestamp on the wanted date; its UTC offset is the one
            used for the returned hours
        vertical_shift: Refraction, parallax and semi-diameter in degrees

    Returns:
        RiseAndSetTime; (0, NaN) tagged NEVER_VISIBLE when cos(H) > 1,
        (NaN, 0) tagged ALWAYS_VISIBLE when cos(H) < -1
    """
    require_aware(instant)
    dec_rad = d2r(eq.declination)
    lat_rad = d2r(geo.latitude)

    cos_h = (-(math.sin(d2r(vertical_shift)) + math.sin(lat_rad) * math.sin(dec_rad)) /
             (math.cos(lat_rad) * math.cos(dec_rad)))

    # |cos_h| > 1 means no crossing; the NaN layout follows the sign of the
    # overflow, visibility follows the sky
    if cos_h > 1.0:
        logger.debug(f"Dec {eq.declination:.4f} never rises at latitude {geo.latitude:.4f}")
        return RiseAndSetTime.circumpolar(Visibility.NEVER_VISIBLE)
    if cos_h < -1.0:
        logger.debug(f"Dec {eq.declination:.4f} never sets at latitude {geo.latitude:.4f}")
        return RiseAndSetTime.never_rises(Visibility.ALWAYS_VISIBLE)

    ha_hours = r2h(math.acos(cos_h))
    ra_hours = d2h(eq.right_ascension)

    lst_rise = wrap(ra_hours - ha_hours, 24.0)
    lst_set = wrap(ra_hours + ha_hours, 24.0)

    local_rise = civil_hours_from_gst(instant, gst_from_lst(geo, lst_rise))
    local_set = civil_hours_from_gst(instant, gst_from_lst(geo, lst_set))

    return RiseAndSetTime(local_rise, local_set)


# ============================================================================
# Trajectories
# ============================================================================

class HorizonTrajectory:
    """
    Lazily evaluated path of an object across one observer's sky.

    Each pass over the trajectory recomputes the samples from the start, so
    it can be iterated any number of times. Sample ``i`` is taken at
    ``start + i * (end - start) / sample_count``.
    """

    def __init__(self, position_fn: Callable[[datetime], EquatorialCoordinate],
                 geo: GeographicCoordinate, start: datetime, end: datetime,
                 sample_count: int = DEFAULT_SAMPLE_COUNT):
        require_aware(start)
        require_aware(end)
        if sample_count < 1:
            raise InvalidInputError(f"sample_count must be positive, got {sample_count}")
        if end < start:
            raise InvalidInputError("trajectory end precedes its start")

        self.position_fn = position_fn
        self.geo = geo
        self.start = start
        self.end = end
        self.sample_count = sample_count

        total_seconds = (end - start).total_seconds()
        self._offsets = np.linspace(0.0, total_seconds, sample_count, endpoint=False)

    def __len__(self) -> int:
        return self.sample_count

    def instants(self) -> Iterator[datetime]:
        for offset in self._offsets:
            yield self.start + timedelta(seconds=float(offset))

    def __iter__(self) -> Iterator[HorizonCoordinate]:
        for instant in self.instants():
            eq = self.position_fn(instant)
            yield equatorial_to_horizon(eq, self.geo, instant)


def horizon_trajectory(position_fn: Callable[[datetime], EquatorialCoordinate],
                       geo: GeographicCoordinate, start: datetime, end: datetime,
                       sample_count: int = DEFAULT_SAMPLE_COUNT) -> HorizonTrajectory:
    """
    Sample an object's horizon coordinates between two instants.

    Args:
        position_fn: Equatorial position as a function of time, e.g.
            ``sun.equatorial_coordinate``
        geo: Observer position
        start: First sample time
        end: End of the sampled interval (not itself sampled)
        sample_count: Number of samples

    Returns:
        HorizonTrajectory yielding ``sample_count`` HorizonCoordinates
    """
    return HorizonTrajectory(position_fn, geo, start, end, sample_count)


# ============================================================================
# Separations
# ============================================================================

def angular_separation(eq1: EquatorialCoordinate, eq2: EquatorialCoordinate) -> float:
    """
    Calculate angular separation between two celestial positions.

    Args:
        eq1, eq2: Equatorial positions in degrees

    Returns:
        Angular separation in degrees
    """
    ra1 = eq1.right_ascension * DEG_TO_RAD
    dec1 = eq1.declination * DEG_TO_RAD
    ra2 = eq2.right_ascension * DEG_TO_RAD
    dec2 = eq2.declination * DEG_TO_RAD

    # Spherical law of cosines
    cos_sep = (math.sin(dec1) * math.sin(dec2) +
               math.cos(dec1) * math.cos(dec2) * math.cos(ra1 - ra2))

    return math.acos(_clamp_unit(cos_sep)) * RAD_TO_DEG


def within_radius(h1: HorizonCoordinate, h2: HorizonCoordinate,
                  degrees_radius: float = 30.0) -> bool:
    """
    Check whether two horizon positions lie within a radius of each other.

    Uses the flat az/alt distance, which is what a sky-chart hit test
    needs; azimuths are not unwrapped across North.
    """
    d_az = h1.azimuth - h2.azimuth
    d_alt = h1.altitude - h2.altitude
    return d_az ** 2 + d_alt ** 2 < degrees_radius ** 2
