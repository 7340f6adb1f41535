"""Unit tests for environment-driven settings."""

import logging

import pytest
from familyloc.core.config import Settings, load_settings
from familyloc.core.exceptions import InvalidInputError


def test_defaults_with_empty_environment():
    assert load_settings({}) == Settings()
    assert Settings().log_level == logging.INFO


def test_reads_all_values():
    settings = load_settings(
        {
            "FAMILYLOC_LOG_LEVEL": "debug",
            "FAMILYLOC_THROTTLE_DISTANCE_KM": "0.5",
            "FAMILYLOC_THROTTLE_MINUTES": "240",
        }
    )

    assert settings.log_level == logging.DEBUG
    assert settings.throttle_distance_km == 0.5
    assert settings.throttle_minutes == 240


def test_blank_values_keep_defaults():
    assert load_settings({"FAMILYLOC_LOG_LEVEL": "", "FAMILYLOC_THROTTLE_MINUTES": ""}) == Settings()


def test_falls_back_to_os_environ(monkeypatch):
    monkeypatch.setenv("FAMILYLOC_THROTTLE_MINUTES", "5")
    assert load_settings().throttle_minutes == 5


@pytest.mark.parametrize(
    "env",
    [
        {"FAMILYLOC_LOG_LEVEL": "loud"},
        {"FAMILYLOC_THROTTLE_DISTANCE_KM": "far"},
        {"FAMILYLOC_THROTTLE_DISTANCE_KM": "-1"},
        {"FAMILYLOC_THROTTLE_DISTANCE_KM": "nan"},
        {"FAMILYLOC_THROTTLE_MINUTES": "1.5"},
        {"FAMILYLOC_THROTTLE_MINUTES": "-3"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(InvalidInputError):
        load_settings(env)
