"""
Lunar Ephemeris Module for the Almanac

Low-precision model of the Moon's apparent position: mean orbital elements
at epoch 2010.0 corrected by the principal periodic terms (evection, annual
equation, equation of centre, variation), then tilted by the inclination of
the orbit about the line of nodes. Also provides the illuminated fraction.

The model depends on the Sun's mean anomaly and ecliptic longitude, so a
LunarEphemeris is constructed with the SolarEphemeris it should use.
"""

import math
import logging
from datetime import datetime
from typing import Tuple

from almanac_angles import d2r, r2d, wrap
from almanac_cache import PositionCache
from almanac_coords import ecliptic_to_equatorial
from almanac_models import EclipticCoordinate, EquatorialCoordinate
from almanac_sun import SolarEphemeris
from almanac_time import days_since_epoch_2010

logger = logging.getLogger(__name__)


# ============================================================================
# Constants (angles in degrees, elements at epoch 2010.0)
# ============================================================================

MEAN_LONGITUDE_AT_EPOCH = 91.929336
PERIGEE_LONGITUDE_AT_EPOCH = 130.143076
NODE_LONGITUDE_AT_EPOCH = 291.682547
ORBIT_INCLINATION = 5.145396

# Daily motions
MEAN_LONGITUDE_RATE = 13.1763966
PERIGEE_RATE = 0.1114041
NODE_RATE = 0.0529539

# Amplitudes of the periodic terms
EVECTION = 1.2739
ANNUAL_EQUATION = 0.1858
THIRD_CORRECTION = 0.37
EQUATION_OF_CENTRE = 6.2886
FOURTH_CORRECTION = 0.214
VARIATION = 0.6583
NODE_CORRECTION = 0.16


class LunarEphemeris:
    """Position and phase of the Moon."""

    name = "Moon"

    def __init__(self, sun: SolarEphemeris):
        self.sun = sun
        self.cache = PositionCache("moon")

    def _sun_elements(self, instant: datetime) -> Tuple[float, float]:
        """Sun's mean anomaly and ecliptic longitude at the instant."""
        n = self.sun.mean_anomaly_parameter(instant)
        mean_anomaly = self.sun.mean_anomaly(n)
        return mean_anomaly, self.sun.ecliptic_longitude(mean_anomaly, n)

    def longitude_and_node_longitude(self, instant: datetime) -> Tuple[float, float]:
        """
        Corrected longitude of the Moon and longitude of its ascending node.

        The corrections are applied in sequence; each later term uses the
        longitude or anomaly as corrected by the terms before it.

        Args:
            instant: Timezone-aware datetime

        Returns:
            Tuple of (moon_longitude, node_longitude) in degrees
        """
        days = days_since_epoch_2010(instant)
        sun_mean_anomaly, sun_longitude = self._sun_elements(instant)

        mean_longitude = wrap(MEAN_LONGITUDE_RATE * days + MEAN_LONGITUDE_AT_EPOCH, 360.0)
        mean_anomaly = wrap(mean_longitude - PERIGEE_RATE * days -
                            PERIGEE_LONGITUDE_AT_EPOCH, 360.0)
        mean_node = wrap(NODE_LONGITUDE_AT_EPOCH - NODE_RATE * days, 360.0)

        c = mean_longitude - sun_longitude
        evection = EVECTION * math.sin(d2r(2.0 * c - mean_anomaly))

        sin_sun_anomaly = math.sin(d2r(sun_mean_anomaly))
        annual_equation = ANNUAL_EQUATION * sin_sun_anomaly
        third_correction = THIRD_CORRECTION * sin_sun_anomaly

        corrected_anomaly = mean_anomaly + evection - annual_equation - third_correction
        equation_of_centre = EQUATION_OF_CENTRE * math.sin(d2r(corrected_anomaly))
        fourth_correction = FOURTH_CORRECTION * math.sin(d2r(2.0 * corrected_anomaly))

        longitude = (mean_longitude + evection + equation_of_centre -
                     annual_equation + fourth_correction)
        variation = VARIATION * math.sin(d2r(2.0 * (longitude - sun_longitude)))
        longitude += variation

        node_longitude = mean_node - NODE_CORRECTION * sin_sun_anomaly

        return wrap(longitude, 360.0), wrap(node_longitude, 360.0)

    def equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        """
        Right ascension and declination of the Moon.

        Args:
            instant: Timezone-aware datetime

        Returns:
            EquatorialCoordinate in degrees
        """
        return self.cache.get_or_compute(instant, self._compute_equatorial_coordinate)

    def _compute_equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        longitude, node_longitude = self.longitude_and_node_longitude(instant)
        from_node = d2r(longitude - node_longitude)
        inclination = d2r(ORBIT_INCLINATION)

        y = math.sin(from_node) * math.cos(inclination)
        x = math.cos(from_node)
        ecliptic_longitude = r2d(math.atan2(y, x)) + node_longitude
        ecliptic_latitude = r2d(math.asin(math.sin(from_node) * math.sin(inclination)))

        return ecliptic_to_equatorial(
            EclipticCoordinate(ecliptic_latitude, ecliptic_longitude), instant)

    def phase(self, instant: datetime) -> float:
        """
        Illuminated fraction of the Moon's disc.

        Args:
            instant: Timezone-aware datetime

        Returns:
            Fraction from 0 (new moon) to 1 (full moon)
        """
        _, sun_longitude = self._sun_elements(instant)
        longitude, _ = self.longitude_and_node_longitude(instant)
        return 0.5 * (1.0 - math.cos(d2r(longitude - sun_longitude)))
