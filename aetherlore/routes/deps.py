"""Request dependencies."""

from fastapi import HTTPException, Request

from aetherlore.studio import Studio


def get_studio(request: Request) -> Studio:
    """The Studio owned by the running app."""
    return request.app.state.studio


def entry_or_404(studio: Studio, entry_id: str):
    entry = studio.draft(entry_id)
    if entry is None:
        raise HTTPException(404, "Entry not found")
    return entry
