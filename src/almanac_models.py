"""
Data Model Module for the Almanac

Plain value types exchanged between the time, coordinate and ephemeris
modules. All coordinate types are frozen so that cached positions can be
handed out to any number of callers.

Angles are decimal degrees throughout; rise/set times are decimal hours of
local civil time.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Optional, Protocol


class InvalidInputError(ValueError):
    """Raised when a caller passes a value outside the documented domain."""


def _require_finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")


# ============================================================================
# Coordinates
# ============================================================================

@dataclass(frozen=True)
class EquatorialCoordinate:
    """Direction on the celestial sphere (RA in [0, 360), Dec in [-90, 90])."""
    right_ascension: float
    declination: float


@dataclass(frozen=True)
class HorizonCoordinate:
    """Observed position for one (location, instant) pair."""
    azimuth: float   # degrees from North through East, [0, 360)
    altitude: float  # degrees above the horizon, [-90, 90]

    @property
    def is_above_horizon(self) -> bool:
        return self.altitude > 0.0


@dataclass(frozen=True)
class EclipticCoordinate:
    """Position relative to the plane of the Earth's orbit."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeographicCoordinate:
    """
    Observer position on the Earth's surface.

    The longitude is added to GST / 15 to form the local sidereal time, so
    a value of 64.0 places the observer 64 degrees East of Greenwich and
    -71.05 places it at Boston. Do not flip the sign.
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        _require_finite("latitude", self.latitude)
        _require_finite("longitude", self.longitude)
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidInputError(f"latitude {self.latitude} outside [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidInputError(f"longitude {self.longitude} outside [-180, 180]")


# ============================================================================
# Rise / Set
# ============================================================================

class Visibility(IntEnum):
    """What an object does relative to the horizon over one day"""
    NEVER_VISIBLE = -1
    NORMAL = 0
    ALWAYS_VISIBLE = 1


@dataclass(frozen=True)
class RiseAndSetTime:
    """
    Rise and set times in decimal hours of local civil time.

    A NaN field means no horizon crossing. The two encodings are
    asymmetric: (0, NaN) when the rise/set argument cos(H) is above 1 and
    (NaN, 0) when it is below -1. ``visibility`` says which way the object
    actually stays: cos(H) > 1 is never above the horizon, cos(H) < -1 is
    never below it.
    """
    rise_time: float
    set_time: float
    visibility: Visibility = Visibility.NORMAL

    @classmethod
    def circumpolar(cls, visibility: Visibility = Visibility.ALWAYS_VISIBLE) -> "RiseAndSetTime":
        return cls(0.0, math.nan, visibility)

    @classmethod
    def never_rises(cls, visibility: Visibility = Visibility.NEVER_VISIBLE) -> "RiseAndSetTime":
        return cls(math.nan, 0.0, visibility)


# ============================================================================
# Position sources
# ============================================================================

class PositionSource(Protocol):
    """Anything that can report its equatorial position at an instant."""

    def equatorial_coordinate(self, instant: datetime) -> EquatorialCoordinate:
        ...


@dataclass(frozen=True)
class CelestialObject:
    """Catalog entry for a point source at infinity (fixed RA/Dec)."""
    name: str
    right_ascension: float  # degrees
    declination: float      # degrees

    def __post_init__(self):
        _require_finite("right_ascension", self.right_ascension)
        _require_finite("declination", self.declination)
        if not -90.0 <= self.declination <= 90.0:
            raise InvalidInputError(f"declination {self.declination} outside [-90, 90]")

    def equatorial_coordinate(self, instant: Optional[datetime] = None) -> EquatorialCoordinate:
        """Position of the object; the instant is ignored (no precession)."""
        return EquatorialCoordinate(self.right_ascension, self.declination)
