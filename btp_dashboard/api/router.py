"""Root API router for REST endpoints."""
from fastapi import APIRouter

from btp_dashboard.api.endpoints import auth, factures, stats

router = APIRouter()


@router.get("/health", tags=["health"], summary="Health check")
def health_check() -> dict[str, str]:
    """Return basic service health information."""

    return {"status": "ok"}


router.include_router(auth.router)
router.include_router(factures.router)
router.include_router(stats.router)
