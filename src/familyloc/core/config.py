"""Runtime settings read from environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import InvalidInputError

ENV_LOG_LEVEL = "FAMILYLOC_LOG_LEVEL"
ENV_THROTTLE_DISTANCE_KM = "FAMILYLOC_THROTTLE_DISTANCE_KM"
ENV_THROTTLE_MINUTES = "FAMILYLOC_THROTTLE_MINUTES"


@dataclass(frozen=True)
class Settings:
    """
    Tunables for the CLI and the location throttler.

    Key derivation parameters are not configurable; they are fixed in
    familyloc.security.kdf.
    """

    log_level: int = logging.INFO
    throttle_distance_km: float = 0.1
    throttle_minutes: int = 30


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be a number, got {raw!r}") from e
    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} must be a finite, non-negative number")
    return value


def _parse_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise InvalidInputError(f"{name} must not be negative")
    return value


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise InvalidInputError(f"{ENV_LOG_LEVEL} is not a logging level: {raw!r}")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``environ`` (defaults to os.environ); unset values keep defaults."""
    env = os.environ if environ is None else environ
    defaults = Settings()

    level = defaults.log_level
    if env.get(ENV_LOG_LEVEL):
        level = _parse_level(env[ENV_LOG_LEVEL])

    distance = defaults.throttle_distance_km
    if env.get(ENV_THROTTLE_DISTANCE_KM):
        distance = _parse_float(ENV_THROTTLE_DISTANCE_KM, env[ENV_THROTTLE_DISTANCE_KM])

    minutes = defaults.throttle_minutes
    if env.get(ENV_THROTTLE_MINUTES):
        minutes = _parse_int(ENV_THROTTLE_MINUTES, env[ENV_THROTTLE_MINUTES])

    return Settings(log_level=level, throttle_distance_km=distance, throttle_minutes=minutes)
