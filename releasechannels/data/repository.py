from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from releasechannels.data.loader import load_from_bytes
from releasechannels.domain.errors import DatabaseFileError, ReleaseStoreError
from releasechannels.domain.models import (
    Release,
    ReleaseQuery,
    ReloadResult,
    ReloadState,
    StoreStatus,
)
from releasechannels.storage.memory_store import InMemoryReleaseStore

logger = logging.getLogger(__name__)

DEFAULT_RELOAD_INTERVAL_SECONDS = 30.0


class ReleaseRepository:
    """
    Owns the published store generation and keeps it in sync with the backing file.

    Queries read ``self._store`` once and answer from that generation only.
    Reloads build a complete new generation off to the side and publish it by
    rebinding ``self._store``; a failed reload leaves the previous generation
    in place. Reload cycles are serialized by a lock that queries never take.
    """

    def __init__(
        self,
        db_file: Union[str, Path],
        reload_interval_seconds: float = DEFAULT_RELOAD_INTERVAL_SECONDS,
    ):
        self.db_file = Path(db_file)
        self.reload_interval_seconds = reload_interval_seconds
        self._store: InMemoryReleaseStore = InMemoryReleaseStore()
        self._store.seal()
        self._last_mtime: Optional[datetime] = None
        self._generation = 0
        self._initialized = False
        self._state = ReloadState.IDLE
        self._last_error: Optional[str] = None
        self._reload_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def store(self) -> InMemoryReleaseStore:
        """The currently published generation."""
        return self._store

    @property
    def state(self) -> ReloadState:
        return self._state

    @property
    def last_mtime(self) -> Optional[datetime]:
        return self._last_mtime

    @property
    def ready(self) -> bool:
        return self._initialized

    def query(self, query: ReleaseQuery) -> List[Release]:
        return self._store.query(query)

    def status(self) -> StoreStatus:
        store = self._store
        return StoreStatus(
            db_file=str(self.db_file),
            generation=store.generation,
            releases=len(store),
            source_mtime=store.source_mtime,
            loaded_at=store.loaded_at,
            state=self._state,
            last_error=self._last_error,
        )

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Load the backing file for the first time.

        Any error propagates so the service fails fast at startup instead of
        serving an empty index.
        """
        mtime = await self._stat_mtime()
        data = await self._read_file()
        await self._publish(data, mtime)
        self._initialized = True
        logger.info(f"initial database loaded from {self.db_file}")

    async def reload(self) -> ReloadResult:
        """
        Run one check/rebuild cycle.

        Returns whether a new generation was published. Raises
        DatabaseFileError or MalformedInputError on failure, in which case the
        previous generation remains published.
        """
        async with self._reload_lock:
            try:
                return await self._reload_locked()
            except ReleaseStoreError as e:
                logger.error(f"error loading new database from {self.db_file}: {e}")
                self._last_error = str(e)
                raise
            finally:
                self._state = ReloadState.IDLE

    async def _reload_locked(self) -> ReloadResult:
        self._state = ReloadState.CHECKING
        mtime = await self._stat_mtime()

        if self._last_mtime is not None and mtime <= self._last_mtime:
            self._state = ReloadState.UNCHANGED
            store = self._store
            return ReloadResult(
                status="unchanged",
                generation=store.generation,
                releases=len(store),
                source_mtime=self._last_mtime,
            )

        logger.info(
            f"file changed, reloading database: "
            f"old_mod_time={self._last_mtime} new_mod_time={mtime}"
        )
        self._state = ReloadState.REBUILDING
        data = await self._read_file()
        store = await self._publish(data, mtime)
        self._last_error = None
        self._initialized = True
        logger.info("database reloaded successfully")
        return ReloadResult(
            status="reloaded",
            generation=store.generation,
            releases=len(store),
            source_mtime=mtime,
        )

    async def _publish(self, data: bytes, mtime: datetime) -> InMemoryReleaseStore:
        # Parsing and indexing run in a worker thread so queries keep being served.
        store = await asyncio.to_thread(
            load_from_bytes, data, generation=self._generation + 1, source_mtime=mtime
        )
        # Single rebinding: queries see either the old generation or this one.
        self._generation = store.generation
        self._store = store
        self._last_mtime = mtime
        return store

    async def _stat_mtime(self) -> datetime:
        try:
            stat = await aiofiles.os.stat(self.db_file)
        except OSError as e:
            logger.error(f"error checking file stat for {self.db_file}: {e}")
            raise DatabaseFileError(self.db_file, f"cannot stat database file ({e.strerror or e})") from e
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    async def _read_file(self) -> bytes:
        try:
            async with aiofiles.open(self.db_file, mode="rb") as f:
                return await f.read()
        except OSError as e:
            logger.error(f"error reading database file {self.db_file}: {e}")
            raise DatabaseFileError(self.db_file, f"cannot read database file ({e.strerror or e})") from e

    # ------------------------------------------------------------------
    # Background watcher
    # ------------------------------------------------------------------

    async def _periodic_reload_loop(self) -> None:
        """
        Background task that checks the backing file every reload_interval_seconds.
        """
        logger.info(f"file watcher started (interval={self.reload_interval_seconds}s)")
        try:
            while True:
                await asyncio.sleep(self.reload_interval_seconds)
                try:
                    await self.reload()
                except Exception as e:
                    logger.error(f"error during automatic database reload: {e}")
        except asyncio.CancelledError:
            logger.info("file watcher stopping")
            raise

    def start(self) -> None:
        """Start the background watcher if it is not already running."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._periodic_reload_loop())

    async def stop(self) -> None:
        """Cancel the background watcher and wait for it to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
