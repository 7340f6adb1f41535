"""
Decides whether a new location reading is worth publishing.

A reading is published when it is the first one, when the device moved at
least ``distance_km`` since the last published reading, or when at least
``interval`` has passed since then. Everything else is throttled.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from .config import Settings

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(1.0, a)))


class LocationThrottler:
    def __init__(self, distance_km: float = 0.1, interval: timedelta = timedelta(minutes=30)):
        self.distance_km = distance_km
        self.interval = interval
        self._last_lat: Optional[float] = None
        self._last_lon: Optional[float] = None
        self._last_update: Optional[datetime] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocationThrottler":
        return cls(
            distance_km=settings.throttle_distance_km,
            interval=timedelta(minutes=settings.throttle_minutes),
        )

    def should_throttle(self, latitude: float, longitude: float, now: Optional[datetime] = None) -> bool:
        """Return True when the reading should be skipped."""
        if self._last_lat is None or self._last_lon is None:
            return False

        distance = haversine_km(self._last_lat, self._last_lon, latitude, longitude)
        if distance >= self.distance_km:
            logger.debug("significant location change: %.2fkm", distance)
            return False

        if self._last_update is not None:
            elapsed = (now or datetime.now()) - self._last_update
            if elapsed >= self.interval:
                logger.debug("time-based location update (%d min since last)", elapsed.total_seconds() // 60)
                return False

        return True

    def record_update(self, latitude: float, longitude: float, now: Optional[datetime] = None) -> None:
        self._last_lat = latitude
        self._last_lon = longitude
        self._last_update = now or datetime.now()

    def reset(self) -> None:
        self._last_lat = None
        self._last_lon = None
        self._last_update = None
