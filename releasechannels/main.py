from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from releasechannels import __version__
from releasechannels.api.releases import router as releases_router
from releasechannels.core.config import load_config
from releasechannels.data.repository import ReleaseRepository
from releasechannels.domain.models import ServiceConfig

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(config: Optional[ServiceConfig] = None) -> FastAPI:
    """
    Build the FastAPI application around a release repository for config.db_file.
    """
    config = config or load_config()

    app = FastAPI(
        title="Release Channels API",
        version=__version__,
        description="Maps a container and release channel to a fully-qualified image reference.",
    )
    app.state.config = config
    app.state.repository = ReleaseRepository(
        config.db_file,
        reload_interval_seconds=config.reload_interval_seconds,
    )

    @app.on_event("startup")
    async def startup_event() -> None:
        """
        Load the backing file (failing fast if it is unusable) and start the
        background file watcher.
        """
        logger.info(f"starting release channels server version={__version__}")
        repository: ReleaseRepository = app.state.repository
        await repository.initialize()
        repository.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("api exiting")
        await app.state.repository.stop()

    app.include_router(releases_router, prefix="/v1", tags=["releases"])
    return app


def main() -> None:
    import uvicorn

    config = load_config()
    configure_logging(config.log_level)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    """
    Allow running `python -m releasechannels.main` to start the server.
    """
    main()
