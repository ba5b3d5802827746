"""
Angle Unit Module for the Almanac

This module provides the angle arithmetic shared by every other module:
- Degree / radian / hour conversions
- Range normalization (wrap)
- Sexagesimal display and parsing (D:M:S, H:M:S, H:M)
"""

import math

from almanac_models import InvalidInputError


# ============================================================================
# Constants
# ============================================================================

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi
HOURS_TO_RAD = math.pi / 12.0
RAD_TO_HOURS = 12.0 / math.pi
DEGREES_PER_HOUR = 15.0


# ============================================================================
# Unit Conversions
# ============================================================================

def d2r(angle: float) -> float:
    """Degrees to radians."""
    return angle * DEG_TO_RAD


def r2d(angle: float) -> float:
    """Radians to degrees."""
    return angle * RAD_TO_DEG


def d2h(angle: float) -> float:
    """Degrees to decimal hours."""
    return angle / DEGREES_PER_HOUR


def h2d(angle: float) -> float:
    """Decimal hours to degrees."""
    return angle * DEGREES_PER_HOUR


def h2r(angle: float) -> float:
    """Decimal hours to radians."""
    return angle * HOURS_TO_RAD


def r2h(angle: float) -> float:
    """Radians to decimal hours."""
    return angle * RAD_TO_HOURS


def wrap(x: float, period: float) -> float:
    """
    Put a value into the half-open range [0, period).

    Args:
        x: Value to normalize (NaN is returned unchanged)
        period: Length of the range, e.g. 360.0 or 24.0

    Returns:
        Equivalent value in [0, period)
    """
    wrapped = math.fmod(x, period)
    if wrapped < 0.0:
        wrapped += period
    # tiny negative inputs round up to exactly one period
    if wrapped >= period:
        wrapped -= period
    return wrapped


# ============================================================================
# Display
# ============================================================================

def format_dms(value: float, display_sign: bool = False) -> str:
    """
    Format a decimal angle or time as D:MM:SS.

    Args:
        value: Decimal degrees or decimal hours
        display_sign: Prefix '+' on non-negative values

    Returns:
        String such as '-8:12:06' or '+21:42:00'
    """
    sign = ""
    if value < 0:
        sign = "-"
    elif display_sign:
        sign = "+"

    total_seconds = int(round(abs(value) * 3600.0))
    whole, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{sign}{whole}:{minutes:02d}:{seconds:02d}"


def format_hms(angle: float, display_sign: bool = False) -> str:
    """Format an angle given in degrees as H:MM:SS."""
    return format_dms(d2h(angle), display_sign)


def format_hm(time: float) -> str:
    """Format decimal hours as H:MM (minutes rounded)."""
    total_minutes = int(round(time * 60.0))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}:{minutes:02d}"


# ============================================================================
# Parsing
# ============================================================================

def parse_dms(angle_dms: str) -> float:
    """
    Parse a D:M:S.S string into a decimal value.

    Missing minute and second fields count as zero. A leading '-' makes the
    whole value negative, including '-0:30:00'.

    Args:
        angle_dms: String in D:M:S.S format

    Returns:
        Decimal degrees (or decimal hours when given hours)
    """
    text = angle_dms.strip()
    if not text:
        raise InvalidInputError("empty sexagesimal string")

    sign = -1.0 if text[0] == "-" else 1.0
    parts = text.lstrip("+-").split(":")
    if len(parts) > 3:
        raise InvalidInputError(f"too many fields in '{angle_dms}'")

    try:
        whole = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 and parts[1] else 0
        seconds = float(parts[2]) if len(parts) > 2 and parts[2] else 0.0
    except ValueError as exc:
        raise InvalidInputError(f"unable to parse '{angle_dms}'") from exc

    if not (0 <= minutes < 60 and 0.0 <= seconds < 60.0):
        raise InvalidInputError(f"minutes/seconds out of range in '{angle_dms}'")

    return sign * (whole + minutes / 60.0 + seconds / 3600.0)


def parse_hms(angle_hms: str) -> float:
    """Parse an H:M:S.S string and return the angle in degrees."""
    return h2d(parse_dms(angle_hms))
