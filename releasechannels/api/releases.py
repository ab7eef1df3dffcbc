from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from releasechannels.core.dependencies import get_repository
from releasechannels.data.repository import ReleaseRepository
from releasechannels.domain.errors import ReleaseStoreError
from releasechannels.domain.models import ReleaseQuery, StoreStatus

logger = logging.getLogger(__name__)
router = APIRouter()

# ---------------------------------------------------------------------------
# 1. GET /v1/releases
# ---------------------------------------------------------------------------


@router.get("/releases")
async def query_releases(
    container: str = Query(default=""),
    release_channel: str = Query(default="", alias="releaseChannel"),
    repo: ReleaseRepository = Depends(get_repository),
) -> JSONResponse:
    """
    Look up releases by container, release channel, both, or neither.

    Returns 200 with the matching releases, or 404 with an empty list.
    """
    results = repo.query(ReleaseQuery(container=container, release_channel=release_channel))
    content = [r.model_dump(by_alias=True) for r in results]
    if not content:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=content)
    return JSONResponse(status_code=status.HTTP_200_OK, content=content)


# ---------------------------------------------------------------------------
# 2. POST /v1/reload
# ---------------------------------------------------------------------------


@router.post("/reload")
async def reload_releases(repo: ReleaseRepository = Depends(get_repository)) -> JSONResponse:
    """
    Check the backing file now and rebuild the index if it changed.
    """
    try:
        result = await repo.reload()
    except ReleaseStoreError as e:
        logger.error(f"manual reload failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# 3. Probes and status
# ---------------------------------------------------------------------------


@router.get("/ready")
async def ready(repo: ReleaseRepository = Depends(get_repository)) -> JSONResponse:
    if not repo.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready"},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "ready"})


@router.get("/health")
async def health() -> dict:
    """
    Lightweight liveness check endpoint.
    """
    return {"status": "ok"}


@router.get("/status", response_model=StoreStatus)
async def store_status(repo: ReleaseRepository = Depends(get_repository)) -> StoreStatus:
    """
    Published generation, reload watermark and last reload error.
    """
    return repo.status()
