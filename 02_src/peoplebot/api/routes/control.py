"""Control API routes."""

from pydantic import BaseModel
from fastapi import APIRouter

from ...app import Application


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class SweepResponse(BaseModel):
    """Result of a manual expiry sweep."""

    removed: int
    remaining: int


def create_control_router(app: Application) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Drop all dialogs and trace events."""
        await app.reset()
        return {"status": "ok"}

    @router.post("/sweep", response_model=SweepResponse)
    async def sweep_expired() -> dict:
        """Run the expiry sweep (still rate-limited to once per lifetime)."""
        removed = app.sweep_expired()
        return {"removed": removed, "remaining": len(app.session_store)}

    return router
