"""
Position cache shared by the Sun and Moon models.

Positions are keyed by the instant truncated to whole UTC seconds. Once a
position is stored it is never replaced or evicted; the workload is a fixed
set of instants (a night, a trajectory) queried many times.
"""

from __future__ import annotations

import math
import logging
import threading
from datetime import datetime
from typing import Callable, Dict

from almanac_models import EquatorialCoordinate
from almanac_time import require_aware

logger = logging.getLogger(__name__)


def cache_key(instant: datetime) -> int:
    """Whole UTC seconds since the Unix epoch."""
    return math.floor(require_aware(instant).timestamp())


class PositionCache:
    """Thread-safe memo of equatorial positions by instant."""

    def __init__(self, name: str = "positions"):
        self.name = name
        self._entries: Dict[int, EquatorialCoordinate] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, instant: datetime) -> bool:
        key = cache_key(instant)
        with self._lock:
            return key in self._entries

    def get_or_compute(self, instant: datetime,
                       compute: Callable[[datetime], EquatorialCoordinate]) -> EquatorialCoordinate:
        """
        Return the cached position for ``instant``, computing it on a miss.

        The computation runs outside the lock. If two threads miss on the
        same key both compute, and the first value inserted is the one every
        caller gets back.
        """
        key = cache_key(instant)
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached

        logger.debug(f"{self.name}: cache miss for {key}")
        value = compute(instant)
        with self._lock:
            return self._entries.setdefault(key, value)
