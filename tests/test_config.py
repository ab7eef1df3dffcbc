"""Tests for environment-driven configuration."""

from pathlib import Path

import pydantic
import pytest

from releasechannels.core.config import load_config


def test_defaults():
    config = load_config({})

    assert config.db_file == Path("db/db.json")
    assert config.reload_interval_seconds == 30
    assert config.port == 8089
    assert config.log_level == "INFO"


def test_environment_overrides():
    config = load_config(
        {
            "RELEASES_DB_FILE": "/srv/releases.json",
            "RELEASES_RELOAD_INTERVAL_SECONDS": "5",
            "RELEASES_PORT": "9000",
            "RELEASES_LOG_LEVEL": "debug",
            "RELEASES_HOST": "  ",
        }
    )

    assert config.db_file == Path("/srv/releases.json")
    assert config.reload_interval_seconds == 5.0
    assert config.port == 9000
    assert config.log_level == "DEBUG"
    assert config.host == "0.0.0.0"


@pytest.mark.parametrize(
    "env",
    [
        {"RELEASES_RELOAD_INTERVAL_SECONDS": "0"},
        {"RELEASES_RELOAD_INTERVAL_SECONDS": "soon"},
        {"RELEASES_PORT": "70000"},
    ],
)
def test_invalid_values_are_rejected(env):
    with pytest.raises(pydantic.ValidationError):
        load_config(env)
