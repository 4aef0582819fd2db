"""Control API routes."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...app import Application


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


def create_control_router(app: Application) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api", tags=["control"])

    @router.get("/health", response_model=StatusResponse)
    async def health() -> dict:
        """Liveness check."""
        return {"status": "ok"}

    @router.post("/control/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Reset stored data between test runs."""
        try:
            await app.reset()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
