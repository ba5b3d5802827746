"""
Example Usage of the Astronomical Almanac

This file demonstrates how to use the almanac modules to:
1. Set up an almanac for an observing site
2. Calculate the Sun and Moon almanac for one night
3. Convert catalog positions to azimuth/altitude
4. Sample the path of the Sun, the Moon or a star across the sky
5. Check targets against the Moon
"""

import sys
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

# Add src to path if running from project root
sys.path.insert(0, 'src')

from almanac import Almanac, Config, load_site
from almanac_angles import format_dms, format_hm, format_hms, parse_dms, parse_hms
from almanac_coords import rise_and_set_time
from almanac_models import CelestialObject, GeographicCoordinate, Visibility
from almanac_time import greenwich_sidereal_time, julian_date, local_sidereal_time

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


EST = timezone(timedelta(hours=-5))

BRIGHT_STARS = [
    CelestialObject("Rigel", parse_hms("5:14:32.28"), parse_dms("-8:12:5.9")),
    CelestialObject("Denebola", parse_hms("11:49:3.07"), parse_dms("14:34:17.6")),
    CelestialObject("Vega", parse_hms("18:36:56.46"), parse_dms("38:47:6.4")),
    CelestialObject("Antares", parse_hms("16:29:24.46"), parse_dms("-26:25:55.6")),
    CelestialObject("Navi", parse_hms("0:56:42.57"), parse_dms("60:43:0.6")),
]


def demonstrate_almanac_initialization():
    """Demonstrate almanac initialization and site lookup"""

    print("\n" + "="*60)
    print("ALMANAC INITIALIZATION")
    print("="*60)

    site = load_site(Config.DEFAULT_SITE)
    almanac = Almanac(site)

    print(f"\nAlmanac Configuration:")
    print(f"  Trajectory samples: {almanac.config.SAMPLE_COUNT}")
    print(f"  Min moon separation: {almanac.config.MIN_MOON_SEPARATION}°")
    print(f"  Twilight angles: {almanac.config.CIVIL_TWILIGHT:.0f}° / "
          f"{almanac.config.NAUTICAL_TWILIGHT:.0f}° / {almanac.config.ASTRONOMICAL_TWILIGHT:.0f}°")

    print(f"\nSite Parameters:")
    print(f"  Latitude:  {format_dms(site.latitude, display_sign=True)}")
    print(f"  Longitude: {format_dms(site.longitude, display_sign=True)}")

    print(f"\nKnown sites: {', '.join(sorted(Config.SITES))}")

    return almanac


def demonstrate_time_system(almanac: Almanac):
    """Demonstrate Julian Date and sidereal time"""

    print("\n" + "="*60)
    print("TIME SYSTEM")
    print("="*60)

    instant = datetime(2015, 1, 1, 0, 0, 0, tzinfo=EST)
    print(f"\nInstant: {instant.isoformat()}")
    print(f"  Julian Date:      {julian_date(instant):.6f}")
    print(f"  Greenwich ST:     {format_dms(greenwich_sidereal_time(instant))}")
    print(f"  Local ST:         {format_dms(local_sidereal_time(almanac.site, instant))}")


def demonstrate_night_almanac(almanac: Almanac):
    """Demonstrate the Sun and Moon almanac for one night"""

    print("\n" + "="*60)
    print("NIGHT ALMANAC")
    print("="*60)

    report = almanac.night_report(datetime(2018, 4, 9, tzinfo=timezone(timedelta(hours=-4))))
    print()
    for line in report.summary_lines():
        print(line)

    print("\nPolar example (Tromso at midsummer):")
    polar = Almanac(GeographicCoordinate(69.65, 18.96), sun=almanac.sun, moon=almanac.moon)
    polar_report = polar.night_report(datetime(2019, 6, 21, tzinfo=timezone(timedelta(hours=2))))
    print(f"  Sun visibility: {polar_report.sun.visibility.name}")
    if polar_report.sun.visibility == Visibility.ALWAYS_VISIBLE:
        print("  The Sun does not set")


def demonstrate_star_positions(almanac: Almanac):
    """Demonstrate catalog position to azimuth/altitude conversion"""

    print("\n" + "="*60)
    print("STAR POSITIONS")
    print("="*60)

    instant = datetime(2015, 1, 1, 0, 0, 0, tzinfo=EST)
    print(f"\nPositions at {instant.isoformat()}:")
    print("-" * 70)
    print(f"{'Star':<10} {'RA':>10} {'Dec':>10} {'Az':>10} {'Alt':>10} {'Rise':>6} {'Set':>6}")
    print("-" * 70)

    for star in BRIGHT_STARS:
        horizon = almanac.horizon_coordinate(star, instant)
        rise_set = almanac_rise_and_set(almanac, star, instant)
        print(f"{star.name:<10} {format_hms(star.right_ascension):>10} "
              f"{format_dms(star.declination, True):>10} {horizon.azimuth:10.3f} "
              f"{horizon.altitude:10.3f} {rise_set[0]:>6} {rise_set[1]:>6}")


def almanac_rise_and_set(almanac: Almanac, star: CelestialObject, instant: datetime):
    """Rise and set of a star as display strings"""
    rise_set = rise_and_set_time(star.equatorial_coordinate(instant), almanac.site, instant)
    if rise_set.visibility == Visibility.ALWAYS_VISIBLE:
        return "up", "up"
    if rise_set.visibility == Visibility.NEVER_VISIBLE:
        return "down", "down"
    return format_hm(rise_set.rise_time), format_hm(rise_set.set_time)


def demonstrate_trajectories(almanac: Almanac):
    """Demonstrate sampling a path across the sky"""

    print("\n" + "="*60)
    print("TRAJECTORIES")
    print("="*60)

    start = datetime(2018, 4, 9, 18, 0, 0, tzinfo=timezone(timedelta(hours=-4)))
    end = start + timedelta(hours=12)

    for source in (almanac.sun, almanac.moon):
        trajectory = almanac.trajectory(source, start, end, sample_count=12)
        print(f"\n{source.name} from {start.strftime('%H:%M')} for 12 hours:")
        for instant, horizon in zip(trajectory.instants(), trajectory):
            marker = "*" if horizon.is_above_horizon else " "
            print(f"  {instant.strftime('%H:%M')}  Az={horizon.azimuth:7.2f}  "
                  f"Alt={horizon.altitude:+7.2f} {marker}")

    # Full resolution, shared by several workers
    trajectory = almanac.trajectory(almanac.sun, start, end)
    with ThreadPoolExecutor(max_workers=4) as executor:
        peaks = list(executor.map(lambda _: max(h.altitude for h in trajectory), range(4)))
    print(f"\nHighest Sun altitude after 18:00: {peaks[0]:.2f}° "
          f"({len(trajectory)} samples, {len(almanac.sun.cache)} cached positions)")


def demonstrate_moon_avoidance(almanac: Almanac):
    """Demonstrate checking targets against the Moon"""

    print("\n" + "="*60)
    print("MOON AVOIDANCE")
    print("="*60)

    instant = datetime(2003, 9, 1, tzinfo=timezone.utc)
    moon_position = almanac.moon.equatorial_coordinate(instant)
    print(f"\nMoon at {instant.isoformat()}: RA={format_hms(moon_position.right_ascension)} "
          f"Dec={format_dms(moon_position.declination, True)}, "
          f"illuminated {almanac.moon.phase(instant):.1%}")

    for star in BRIGHT_STARS:
        separation = almanac.moon_separation(star, instant)
        status = "OK" if almanac.is_clear_of_moon(star, instant) else "TOO CLOSE"
        print(f"  {star.name:<10} {separation:7.2f}°  {status}")


def main():
    """Main demonstration function"""

    print("\n" + "="*80)
    print(" " * 22 + "ASTRONOMICAL ALMANAC")
    print(" " * 20 + "Python Module Demonstration")
    print("="*80)

    almanac = demonstrate_almanac_initialization()
    demonstrate_time_system(almanac)
    demonstrate_night_almanac(almanac)
    demonstrate_star_positions(almanac)
    demonstrate_trajectories(almanac)
    demonstrate_moon_avoidance(almanac)

    print("\n" + "="*80)
    print(" " * 25 + "DEMONSTRATION COMPLETE")
    print("="*80)


if __name__ == "__main__":
    main()
