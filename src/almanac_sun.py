"""
Solar Ephemeris Module for the Almanac

Low-precision model of the Sun's apparent position (circular-orbit mean
longitude plus the equation of centre, orbital elements at epoch 2010.0),
with sunrise/sunset and twilight duration built on top of it.

Create one SolarEphemeris per process and pass it to whoever needs it; the
instance owns the position cache.
"""

import math
import logging
from datetime import datetime

from almanac_angles import d2r, r2d, wrap
from almanac_cache import PositionCache
from almanac_coords import STANDARD_REFRACTION, ecliptic_to_equatorial, rise_and_set_time
from almanac_models import (
    EclipticCoordinate, EquatorialCoordinate, GeographicCoordinate, RiseAndSetTime
)
from almanac_time import days_since_epoch_2010, local_noon

logger = logging.getLogger(__name__)


# ============================================================================
# Constants (angles in degrees, elements at epoch 2010.0)
# ============================================================================

TROPICAL_YEAR_DAYS = 365.242191
ECLIPTIC_LONGITUDE_AT_EPOCH = 279.557208
PERIGEE_LONGITUDE_AT_EPOCH = 283.112438
ORBIT_ECCENTRICITY = 0.016705

ANGULAR_DIAMETER = 0.533
PARALLAX = 8.79 / 3600.0
SUN_VERTICAL_SHIFT = STANDARD_REFRACTION + ANGULAR_DIAMETER / 2.0 + PARALLAX

# Zenith distance of the Sun at the end of each twilight
CIVIL_TWILIGHT = 96.0
NAUTICAL_TWILIGHT = 102.0
ASTRONOMICAL_TWILIGHT = 108.0

# Sidereal to solar hours for the twilight hour-angle difference
TWILIGHT_TIME_SCALE = 0.9972695659722222


def _acos_or_nan(value: float) -> float:
    """acos that signals an unreachable angle with NaN instead of raising."""
    if math.isnan(value) or abs(value) > 1.0:
        return math.nan
    return math.acos(value)


class SolarEphemeris:
    """Position, rise/set and twilight of the Sun."""

    name = "Sun"

    def __init__(self):
        self.cache = PositionCache("sun")

    def mean_anomaly_parameter(self, instant: datetime) -> float:
        """
        Mean motion of the Sun since epoch 2010.0.

        Args:
            instant: Timezone-aware datetime

        Returns:
            N in degrees (0-360)
        """
        days = days_since_epoch_2010(instant)
        return wrap((360.0 / TROPICAL_YEAR_DAYS) * days, 360.0)

    def mean_anomaly(self, n: float) -> float:
        """Mean anomaly of the Sun in degrees for a given N."""
        mean_anomaly = n + ECLIPTIC_LONGITUDE_AT_EPOCH - PERIGEE_LONGITUDE_AT_EPOCH
        if mean_anomaly < 0:
            mean_anomaly += 360.0
        return mean_anomaly

    def ecliptic_longitude(self, mean_anomaly: float, n: float) -> float:
        """
        Ecliptic longitude of the Sun.

        Args:
            mean_anomaly: Mean anomaly in degrees
            n: N in degrees

        Returns:
            Longitude in degrees (0-360)
        """
        equation_of_centre = ((360.0 / math.pi) * ORBIT_ECCENTRICITY *
                              math.sin(d2r(mean_anomaly)))
        longitude = n + equation_of_centre + ECLIPTIC_LONGITUDE_AT_EPOCH
        # N < 360 and the other terms are bounded, one subtraction suffices
        if longitude >= 360.0:
            longitude -= 360.0
        return longitude

    def ecliptic_longitude_at(self, instant: datetime) -> float:
        """Ecliptic longitude of the Sun at an instant, in degrees."""
        n = self.mean_anomaly_parameter(instant)
        return self.ecliptic_longitude(self.mean_anomaly(n), n)

    def equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        """
        Right ascension and declination of the Sun.

        Args:
            instant: Timezone-aware datetime

        Returns:
            EquatorialCoordinate in degrees
        """
        return self.cache.get_or_compute(instant, self._compute_equatorial_coordinate)

    def _compute_equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        longitude = self.ecliptic_longitude_at(instant)
        return ecliptic_to_equatorial(EclipticCoordinate(0.0, longitude), instant)

    def rise_and_set_time(self, geo: GeographicCoordinate, instant: datetime) -> RiseAndSetTime:
        """
        Sunrise and sunset on the civil date of ``instant``.

        The Sun's position is taken at local noon and held fixed for the
        day. Refraction, semi-diameter and parallax lower the horizon.

        Args:
            geo: Observer position
            instant: Any timestamp on the wanted local date

        Returns:
            RiseAndSetTime in local hours, with NaN sentinels during polar
            day or night
        """
        noon = local_noon(instant)
        eq = self.equatorial_coordinate(noon)
        return rise_and_set_time(eq, geo, noon, SUN_VERTICAL_SHIFT)

    def twilight_duration(self, geo: GeographicCoordinate, instant: datetime,
                          twilight_angle: float = ASTRONOMICAL_TWILIGHT) -> float:
        """
        Length of twilight on the civil date of ``instant``.

        Args:
            geo: Observer position
            instant: Any timestamp on the wanted local date
            twilight_angle: Zenith distance of the Sun that ends twilight
                (96 civil, 102 nautical, 108 astronomical)

        Returns:
            Duration in hours, or NaN when the Sun never reaches the horizon
            or the twilight depression that day
        """
        eq = self.equatorial_coordinate(local_noon(instant))
        lat = d2r(geo.latitude)
        dec = d2r(eq.declination)

        ha_horizon = _acos_or_nan(-math.tan(lat) * math.tan(dec))
        ha_twilight = _acos_or_nan(
            (math.cos(d2r(twilight_angle)) - math.sin(lat) * math.sin(dec)) /
            (math.cos(lat) * math.cos(dec)))

        duration = ((r2d(ha_twilight) - r2d(ha_horizon)) / 15.0) * TWILIGHT_TIME_SCALE
        if math.isnan(duration):
            logger.debug(f"No {twilight_angle:.0f} deg twilight at latitude {geo.latitude:.3f}")
        return duration
