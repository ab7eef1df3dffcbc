"""Tests for building store generations from JSON release documents."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from releasechannels.data.loader import load_from_bytes
from releasechannels.domain.errors import MalformedInputError
from releasechannels.domain.models import Release, ReleaseDocument, ReleaseQuery


def as_blob(releases) -> bytes:
    return json.dumps({"releases": releases}).encode("utf-8")


def test_loads_sample_document_in_order():
    blob = as_blob(
        [
            {"container": "app", "releaseChannel": "dev", "imagePath": "img:dev"},
            {"container": "app", "releaseChannel": "prod", "imagePath": "img:prod"},
        ]
    )

    store = load_from_bytes(blob)

    assert [r.image_path for r in store.query(ReleaseQuery(container="app"))] == [
        "img:dev",
        "img:prod",
    ]
    assert store.query(ReleaseQuery(container="app", release_channel="prod")) == [
        Release(container="app", release_channel="prod", image_path="img:prod")
    ]
    assert store.query(ReleaseQuery(container="missing")) == []


def test_bad_records_are_skipped_not_fatal(caplog):
    blob = as_blob(
        [
            {"container": "app", "releaseChannel": "dev", "imagePath": "img:dev"},
            {"container": "app", "imagePath": "img:nochannel"},
            {"container": "", "releaseChannel": "dev", "imagePath": "img:blank"},
            {"container": 42, "releaseChannel": "dev", "imagePath": "img:int"},
            "not-a-record",
            {"container": "api", "releaseChannel": "prod", "imagePath": "api:prod"},
        ]
    )

    with caplog.at_level(logging.ERROR, logger="releasechannels.data.loader"):
        store = load_from_bytes(blob)

    assert len(store) == 2
    assert [r.container for r in store.query(ReleaseQuery())] == ["app", "api"]
    assert "#1" in caplog.text and "releaseChannel" in caplog.text
    assert "#2" in caplog.text and "container" in caplog.text
    assert "#3" in caplog.text
    assert "#4" in caplog.text


def test_result_is_sealed_with_generation_metadata():
    mtime = datetime(2024, 1, 2, tzinfo=timezone.utc)

    store = load_from_bytes(as_blob([]), generation=7, source_mtime=mtime)

    assert store.sealed
    assert store.generation == 7
    assert store.source_mtime == mtime
    assert len(store) == 0


def test_missing_releases_key_yields_empty_store():
    assert len(load_from_bytes(b"{}")) == 0


def test_accepts_text_input():
    blob = as_blob([{"container": "a", "releaseChannel": "b", "imagePath": "c"}]).decode()

    assert len(load_from_bytes(blob)) == 1


@pytest.mark.parametrize(
    "blob",
    [
        b"",
        b"{not json",
        b"[]",
        b'"releases"',
        b'{"releases": {"container": "app"}}',
        b"\xff\xfe\x00garbage",
    ],
)
def test_malformed_input_aborts_load(blob):
    with pytest.raises(MalformedInputError):
        load_from_bytes(blob)


def test_shipped_sample_document_matches_loaded_store():
    blob = (Path(__file__).resolve().parents[1] / "db" / "db.json").read_bytes()

    document = ReleaseDocument.model_validate_json(blob)
    store = load_from_bytes(blob)

    assert store.query(ReleaseQuery()) == document.releases
    assert ReleaseDocument(releases=store.query(ReleaseQuery())).model_dump(by_alias=True) == json.loads(blob)
