"""Shared fixtures for the release channel tests."""

import json
import os
from pathlib import Path

import pytest

SAMPLE_RELEASES = [
    {"container": "app", "releaseChannel": "dev", "imagePath": "img:dev"},
    {"container": "app", "releaseChannel": "prod", "imagePath": "img:prod"},
]


def write_db(path: Path, releases, mtime=None) -> Path:
    """Write a release document to path, optionally pinning its modification time."""
    path.write_text(json.dumps({"releases": releases}), encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    return write_db(tmp_path / "db.json", SAMPLE_RELEASES, mtime=1_700_000_000)


@pytest.fixture(name="write_db")
def write_db_fixture():
    return write_db
