"""
Reference Ephemerides using Astropy

This module reimplements the Sun and Moon position sources of
almanac_sun.py / almanac_moon.py on top of astropy's built-in ephemeris.
They follow the same interface (``equatorial_coordinate(instant)`` and, for
the Moon, ``phase(instant)``) so either can be passed wherever a position
source is expected, and are used to measure the error of the fast models.

Astropy's positions are geocentric GCRS (J2000 axes) and include
precession, nutation and aberration; the fast models do not, so agreement
is expected only to a few tenths of a degree.
"""

import math
import logging
import warnings
from datetime import datetime, timezone

import numpy as np

# Suppress astropy warnings for cleaner output
warnings.filterwarnings('ignore', category=UserWarning, module='astropy')

from astropy.time import Time
from astropy.coordinates import get_body, get_sun, solar_system_ephemeris
from astropy.utils import iers

from almanac_coords import angular_separation
from almanac_models import EquatorialCoordinate, PositionSource
from almanac_time import require_aware

logger = logging.getLogger(__name__)

# Work offline with the bundled IERS tables
iers.conf.auto_download = False


def _astropy_time(instant: datetime) -> Time:
    utc = require_aware(instant).astimezone(timezone.utc).replace(tzinfo=None)
    return Time(utc, scale='utc')


class AstropySolarEphemeris:
    """Sun position from astropy.coordinates.get_sun."""

    name = "Sun (astropy)"

    def equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        sun = get_sun(_astropy_time(instant))
        return EquatorialCoordinate(float(sun.ra.deg), float(sun.dec.deg))


class AstropyLunarEphemeris:
    """Moon position and phase from astropy's built-in lunar theory."""

    name = "Moon (astropy)"

    def _moon(self, t: Time):
        with solar_system_ephemeris.set('builtin'):
            return get_body('moon', t)

    def equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        moon = self._moon(_astropy_time(instant))
        return EquatorialCoordinate(float(moon.ra.deg), float(moon.dec.deg))

    def phase(self, instant: datetime) -> float:
        """
        Illuminated fraction from the Sun-Moon elongation.

        Returns:
            Fraction from 0 (new moon) to 1 (full moon)
        """
        t = _astropy_time(instant)
        elongation = self._moon(t).separation(get_sun(t))
        return float(0.5 * (1.0 - np.cos(np.radians(elongation.deg))))


def position_error(model: PositionSource, reference: PositionSource,
                   instant: datetime) -> float:
    """
    Angular distance between two position sources at one instant.

    Args:
        model: Position source under test
        reference: Position source taken as truth
        instant: Timezone-aware datetime

    Returns:
        Separation in degrees
    """
    error = angular_separation(model.equatorial_coordinate(instant),
                               reference.equatorial_coordinate(instant))
    if not math.isfinite(error):
        logger.warning(f"Non-finite position error at {instant.isoformat()}")
    return error
