from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from releasechannels.domain.errors import ValidationError
from releasechannels.domain.models import Release, ReleaseKey, ReleaseQuery
from releasechannels.storage.db_manager import ReleaseStore

logger = logging.getLogger(__name__)

# Checked in this order; names match the serialized field names.
_REQUIRED_FIELDS = (
    ("container", "container"),
    ("releaseChannel", "release_channel"),
    ("imagePath", "image_path"),
)


class InMemoryReleaseStore(ReleaseStore):
    """
    One generation of the release index.

    Holds the full list of releases plus three views over it: by container,
    by release channel and by composite key. Writes are idempotent by key, so
    re-writing a (container, channel) pair replaces the earlier record in every
    view at its original position.

    A store is built by a loader and then sealed before it is published;
    sealed stores reject writes.
    """

    def __init__(self, generation: int = 0, source_mtime: Optional[datetime] = None):
        self.generation = generation
        self.source_mtime = source_mtime
        self.loaded_at: Optional[datetime] = None
        self._all: List[Release] = []
        self._by_container: Dict[str, List[Release]] = {}
        self._by_channel: Dict[str, List[Release]] = {}
        self._by_key: Dict[ReleaseKey, Release] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True
        self.loaded_at = datetime.now(timezone.utc)

    def __len__(self) -> int:
        return len(self._all)

    def write(self, release: Release) -> None:
        if self._sealed:
            raise RuntimeError(f"store generation {self.generation} is sealed")

        logger.debug(
            f"new entry container={release.container!r} "
            f"release_channel={release.release_channel!r} image_path={release.image_path!r}"
        )
        for field_name, attr in _REQUIRED_FIELDS:
            if not getattr(release, attr):
                raise ValidationError(
                    field_name,
                    f"`{field_name}` not set on write for {release.to_key()}",
                )

        key = release.to_key()
        previous = self._by_key.get(key)
        self._by_key[key] = release

        if previous is None:
            self._all.append(release)
            self._by_container.setdefault(release.container, []).append(release)
            self._by_channel.setdefault(release.release_channel, []).append(release)
            return

        logger.info(f"replacing existing release for {key}")
        _replace(self._all, previous, release)
        _replace(self._by_container[release.container], previous, release)
        _replace(self._by_channel[release.release_channel], previous, release)

    def query(self, query: ReleaseQuery) -> List[Release]:
        container = query.container
        channel = query.release_channel
        logger.info(f"new query container={container!r} release_channel={channel!r}")

        if container and channel:
            key = ReleaseKey(container=container, release_channel=channel)
            found = self._by_key.get(key)
            if found is None:
                logger.info(f"empty result in search by key for {key}")
                return []
            return [found]

        if container:
            results = self._by_container.get(container)
            if not results:
                logger.info(f"empty result in search by container for {container}")
                return []
            return list(results)

        if channel:
            results = self._by_channel.get(channel)
            if not results:
                logger.info(f"empty result in search by release channel for {channel}")
                return []
            return list(results)

        logger.info("global release store dump")
        return list(self._all)


def _replace(releases: List[Release], old: Release, new: Release) -> None:
    # Match by identity, not equality.
    for i, existing in enumerate(releases):
        if existing is old:
            releases[i] = new
            return
