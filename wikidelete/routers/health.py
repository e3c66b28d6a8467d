from os import getenv

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from wikidelete.models import HealthResponse, ReadyResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)


@router.get(
    "/ready",
    response_model=ReadyResponse,
    responses={503: {"model": ReadyResponse, "description": "Backend is not configured"}},
)
async def ready():
    backend = (getenv("WIKIDELETE_BACKEND") or "memory").strip().lower()
    missing: list[str] = []
    if backend == "wikijs":
        if not getenv("WIKIJS_BASE_URL"):
            missing.append("WIKIJS_BASE_URL missing")
        if not getenv("WIKIJS_API_TOKEN"):
            missing.append("WIKIJS_API_TOKEN missing")
    elif backend != "memory":
        missing.append(f"unknown backend '{backend}'")

    if missing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadyResponse(ready=False, backend=backend, reason="; ".join(missing)).model_dump(),
        )
    return ReadyResponse(ready=True, backend=backend)
