"""Health check, settings and notification endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from aetherlore.models import dump
from aetherlore.studio import Studio

from .deps import get_studio

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(studio: Studio = Depends(get_studio)):
    """Get app settings (theme and AI provider)."""
    return dump(studio.settings)


@router.patch("/settings")
async def update_settings(body: dict, studio: Studio = Depends(get_studio)):
    """Update app settings (partial merge; the "ai" block merges key-by-key)."""
    try:
        return dump(studio.update_settings(body))
    except ValidationError as e:
        raise HTTPException(422, f"Invalid settings: {e.error_count()} field error(s)")


@router.get("/notification")
async def get_notification(studio: Studio = Depends(get_studio)):
    """The most recent user-facing notification, if any."""
    n = studio.notification
    return {"message": n.message, "kind": n.kind} if n else None
