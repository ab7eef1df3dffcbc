from fastapi import HTTPException, Request

from releasechannels.data.repository import ReleaseRepository


def get_repository(request: Request) -> ReleaseRepository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(status_code=503, detail="Release repository is not initialized")
    return repository
