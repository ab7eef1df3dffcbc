from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional, Union

import pydantic

from releasechannels.domain.errors import MalformedInputError, ValidationError
from releasechannels.domain.models import Release
from releasechannels.storage.memory_store import InMemoryReleaseStore

logger = logging.getLogger(__name__)

RELEASES_KEY = "releases"


def load_from_bytes(
    data: Union[bytes, str],
    generation: int = 0,
    source_mtime: Optional[datetime] = None,
) -> InMemoryReleaseStore:
    """
    Build a new, sealed store generation from a JSON release document.

    The whole load fails with MalformedInputError if the blob is not a JSON
    object holding a ``releases`` list. Individual records that fail
    validation are logged and skipped; the rest are still loaded.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"error unmarshalling input: {e}")
        raise MalformedInputError(f"release document is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        logger.error(f"release document is a {type(raw).__name__}, not an object")
        raise MalformedInputError(
            f"release document must be a JSON object, got {type(raw).__name__}"
        )

    records = raw.get(RELEASES_KEY, [])
    if records is None:
        records = []
    if not isinstance(records, list):
        logger.error(f"`{RELEASES_KEY}` is a {type(records).__name__}, not a list")
        raise MalformedInputError(
            f"`{RELEASES_KEY}` must be a list, got {type(records).__name__}"
        )

    store = InMemoryReleaseStore(generation=generation, source_mtime=source_mtime)
    skipped = 0
    for index, record in enumerate(records):
        try:
            release = Release.model_validate(record)
            store.write(release)
        except ValidationError as e:
            skipped += 1
            logger.error(f"skipping release #{index}: missing field `{e.field}` ({e})")
        except pydantic.ValidationError as e:
            skipped += 1
            logger.error(
                f"skipping release #{index}: invalid record "
                f"({e.error_count()} error(s)): {e.errors(include_url=False)}"
            )

    store.seal()
    logger.info(
        f"database loaded: generation={generation} releases_loaded={len(store)} "
        f"records_in={len(records)} skipped={skipped}"
    )
    return store
