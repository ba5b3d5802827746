"""
Almanac Service Module

This module wires the time, coordinate and ephemeris modules into a
service for one observing site:
- Nightly almanac (sunrise/sunset, twilight lengths, moon phase and position)
- Horizon coordinates and sky trajectories for any position source
- Moon separation checks

The Sun and Moon models are created once per Almanac (or injected by the
caller) and shared by everything that asks for a position.

Usage:
    python src/almanac.py 2018 4 9 --lat 42 --lon -80 --utc-offset -4
"""

import sys
import math
import logging
import argparse
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from almanac_angles import d2h, format_hm
from almanac_coords import (
    DEFAULT_SAMPLE_COUNT, HorizonTrajectory, angular_separation,
    equatorial_to_horizon, horizon_trajectory, rise_and_set_time
)
from almanac_models import (
    EquatorialCoordinate, GeographicCoordinate, HorizonCoordinate,
    InvalidInputError, PositionSource, RiseAndSetTime
)
from almanac_moon import LunarEphemeris
from almanac_sun import (
    ASTRONOMICAL_TWILIGHT, CIVIL_TWILIGHT, NAUTICAL_TWILIGHT, SolarEphemeris
)
from almanac_time import local_noon, require_aware

logger = logging.getLogger(__name__)


# ============================================================================
# Constants and Configuration
# ============================================================================

class Config:
    """Configuration constants for the almanac"""

    # Trajectory sampling
    SAMPLE_COUNT = DEFAULT_SAMPLE_COUNT

    # Twilight zenith distances (degrees)
    CIVIL_TWILIGHT = CIVIL_TWILIGHT
    NAUTICAL_TWILIGHT = NAUTICAL_TWILIGHT
    ASTRONOMICAL_TWILIGHT = ASTRONOMICAL_TWILIGHT

    # Observation constraints
    MIN_MOON_SEPARATION = 15.0  # degrees

    # Sites (latitude, longitude in degrees; longitude added to GST / 15)
    DEFAULT_SITE = "DEFAULT"
    SITES = {
        "DEFAULT": (41.8125, -80.0935),
        "GREENWICH": (51.4769, 0.0),
        "LA_SILLA": (-29.2567, -70.7377),
        "BOSTON": (42.37, -71.05),
    }

    # Logging
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def load_site(site_name: str = Config.DEFAULT_SITE) -> GeographicCoordinate:
    """Look up a named site in Config.SITES"""
    try:
        latitude, longitude = Config.SITES[site_name.upper()]
    except KeyError:
        raise InvalidInputError(
            f"unknown site '{site_name}', known sites: {', '.join(sorted(Config.SITES))}"
        ) from None
    logger.info(f"Loaded site parameters for {site_name}")
    return GeographicCoordinate(latitude, longitude)


# ============================================================================
# Data Classes
# ============================================================================

def _format_hours(hours: float) -> str:
    return "--:--" if math.isnan(hours) else format_hm(hours)


@dataclass
class NightReport:
    """Almanac for one civil date at one site"""
    obs_date: date
    site: GeographicCoordinate
    utc_offset: float = 0.0  # hours
    sun: RiseAndSetTime = field(default_factory=RiseAndSetTime.never_rises)
    civil_twilight: float = math.nan         # hours
    nautical_twilight: float = math.nan      # hours
    astronomical_twilight: float = math.nan  # hours
    moon_phase: float = 0.0
    moon_position: Optional[EquatorialCoordinate] = None
    moon: RiseAndSetTime = field(default_factory=RiseAndSetTime.never_rises)

    def summary_lines(self) -> List[str]:
        """Human-readable report, NaN events shown as --:--"""
        lines = [
            f"Almanac for {self.obs_date.isoformat()} at "
            f"lat {self.site.latitude:.4f}, lon {self.site.longitude:.4f} "
            f"(UTC{self.utc_offset:+g})",
            f"  Sunrise:                {_format_hours(self.sun.rise_time)}",
            f"  Sunset:                 {_format_hours(self.sun.set_time)}",
            f"  Civil twilight:         {_format_hours(self.civil_twilight)}",
            f"  Nautical twilight:      {_format_hours(self.nautical_twilight)}",
            f"  Astronomical twilight:  {_format_hours(self.astronomical_twilight)}",
            f"  Moonrise:               {_format_hours(self.moon.rise_time)}",
            f"  Moonset:                {_format_hours(self.moon.set_time)}",
            f"  Moon illumination:      {self.moon_phase:.1%}",
        ]
        if self.moon_position is not None:
            lines.append(f"  Moon position:          RA={d2h(self.moon_position.right_ascension):.3f}h, "
                         f"Dec={self.moon_position.declination:.2f} deg")
        return lines


# ============================================================================
# Almanac Service
# ============================================================================

class Almanac:
    """Positions and almanac events for one observing site"""

    def __init__(self, site: GeographicCoordinate,
                 sun: Optional[SolarEphemeris] = None,
                 moon: Optional[LunarEphemeris] = None,
                 config: Optional[Config] = None):
        self.config = config or Config()
        self.site = site
        self.sun = sun or SolarEphemeris()
        self.moon = moon or LunarEphemeris(self.sun)
        logger.info(f"Almanac initialized for lat {site.latitude:.4f}, lon {site.longitude:.4f}")

    def night_report(self, instant: datetime) -> NightReport:
        """
        Build the almanac for the civil date of ``instant``.

        Args:
            instant: Any timezone-aware timestamp on the wanted local date

        Returns:
            NightReport with all event times in the instant's local hours
        """
        noon = local_noon(instant)
        utc_offset = noon.utcoffset().total_seconds() / 3600.0
        moon_position = self.moon.equatorial_coordinate(noon)

        report = NightReport(
            obs_date=noon.date(),
            site=self.site,
            utc_offset=utc_offset,
            sun=self.sun.rise_and_set_time(self.site, noon),
            civil_twilight=self.sun.twilight_duration(self.site, noon, self.config.CIVIL_TWILIGHT),
            nautical_twilight=self.sun.twilight_duration(self.site, noon, self.config.NAUTICAL_TWILIGHT),
            astronomical_twilight=self.sun.twilight_duration(
                self.site, noon, self.config.ASTRONOMICAL_TWILIGHT),
            moon_phase=self.moon.phase(noon),
            moon_position=moon_position,
            # the Moon moves about 13 deg a day, so this is approximate
            moon=rise_and_set_time(moon_position, self.site, noon),
        )
        logger.info(f"{report.obs_date}: sunrise {_format_hours(report.sun.rise_time)}, "
                    f"sunset {_format_hours(report.sun.set_time)}, "
                    f"moon {report.moon_phase:.1%}")
        return report

    def horizon_coordinate(self, source: PositionSource, instant: datetime) -> HorizonCoordinate:
        """Azimuth/altitude of a position source from this site"""
        return equatorial_to_horizon(source.equatorial_coordinate(instant), self.site, instant)

    def trajectory(self, source: PositionSource, start: datetime, end: datetime,
                   sample_count: Optional[int] = None) -> HorizonTrajectory:
        """Path of a position source across this site's sky"""
        count = sample_count if sample_count is not None else self.config.SAMPLE_COUNT
        return horizon_trajectory(source.equatorial_coordinate, self.site, start, end, count)

    def moon_separation(self, source: PositionSource, instant: datetime) -> float:
        """Angular distance in degrees between a source and the Moon"""
        require_aware(instant)
        return angular_separation(source.equatorial_coordinate(instant),
                                  self.moon.equatorial_coordinate(instant))

    def is_clear_of_moon(self, source: PositionSource, instant: datetime) -> bool:
        """True when a source is at least MIN_MOON_SEPARATION from the Moon"""
        return self.moon_separation(source, instant) >= self.config.MIN_MOON_SEPARATION


# ============================================================================
# Main Entry Point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Sun and Moon almanac for one night')
    parser.add_argument('year', type=int, help='Observation year')
    parser.add_argument('month', type=int, help='Observation month')
    parser.add_argument('day', type=int, help='Observation day')
    parser.add_argument('--site', default=Config.DEFAULT_SITE,
                        help=f'Named site ({", ".join(sorted(Config.SITES))})')
    parser.add_argument('--lat', type=float, help='Observer latitude in degrees')
    parser.add_argument('--lon', type=float, help='Observer longitude in degrees (East positive)')
    parser.add_argument('--utc-offset', type=float, default=0.0,
                        help='Local civil time offset from UTC in hours')
    parser.add_argument('--compare', action='store_true',
                        help='Report the Sun/Moon model error against astropy')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=Config.LOG_FORMAT)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.lat is not None or args.lon is not None:
            if args.lat is None or args.lon is None:
                raise InvalidInputError("--lat and --lon must be given together")
            site = GeographicCoordinate(args.lat, args.lon)
        else:
            site = load_site(args.site)

        zone = timezone(timedelta(hours=args.utc_offset))
        instant = datetime(args.year, args.month, args.day, 12, tzinfo=zone)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 2

    almanac = Almanac(site)
    report = almanac.night_report(instant)
    for line in report.summary_lines():
        print(line)

    if args.compare:
        from almanac_astropy import (
            AstropyLunarEphemeris, AstropySolarEphemeris, position_error
        )
        sun_error = position_error(almanac.sun, AstropySolarEphemeris(), instant)
        moon_error = position_error(almanac.moon, AstropyLunarEphemeris(), instant)
        print(f"  Sun model error:        {sun_error:.3f} deg")
        print(f"  Moon model error:       {moon_error:.3f} deg")

    return 0


if __name__ == "__main__":
    sys.exit(main())
