"""Unit tests for the location throttler."""

from datetime import datetime, timedelta

import pytest
from familyloc.core.config import Settings
from familyloc.core.throttle import LocationThrottler, haversine_km


T0 = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def throttler():
    return LocationThrottler(distance_km=0.1, interval=timedelta(minutes=30))


def test_haversine_zero_distance():
    assert haversine_km(37.7749, -122.4194, 37.7749, -122.4194) == 0.0


def test_haversine_known_distance():
    # San Francisco -> Los Angeles, roughly 559 km
    d = haversine_km(37.7749, -122.4194, 34.0522, -118.2437)
    assert d == pytest.approx(559, abs=2)


def test_haversine_antipodal_does_not_fail():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015.1, abs=0.5)


def test_first_reading_is_never_throttled(throttler):
    assert throttler.should_throttle(37.0, -122.0, now=T0) is False


def test_small_move_soon_after_is_throttled(throttler):
    throttler.record_update(37.7749, -122.4194, now=T0)
    # ~11m north
    assert throttler.should_throttle(37.7750, -122.4194, now=T0 + timedelta(minutes=5)) is True


def test_significant_move_is_published(throttler):
    throttler.record_update(37.7749, -122.4194, now=T0)
    # ~1.1km north
    assert throttler.should_throttle(37.7849, -122.4194, now=T0 + timedelta(minutes=1)) is False


def test_interval_elapsed_is_published(throttler):
    throttler.record_update(37.7749, -122.4194, now=T0)
    assert throttler.should_throttle(37.7749, -122.4194, now=T0 + timedelta(minutes=30)) is False
    assert throttler.should_throttle(37.7749, -122.4194, now=T0 + timedelta(minutes=29)) is True


def test_reset_forgets_last_update(throttler):
    throttler.record_update(1.0, 1.0, now=T0)
    throttler.reset()
    assert throttler.should_throttle(1.0, 1.0, now=T0) is False


def test_from_settings():
    t = LocationThrottler.from_settings(Settings(throttle_distance_km=0.5, throttle_minutes=240))
    assert t.distance_km == 0.5
    assert t.interval == timedelta(hours=4)
