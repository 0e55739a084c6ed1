"""Whole-book endpoints: read, rename, import and export."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from aetherlore.models import dump
from aetherlore.studio import Studio

from .deps import get_studio
from .models import RenameBook

router = APIRouter()


@router.get("/lorebook")
async def get_lorebook(studio: Studio = Depends(get_studio)):
    """Get the full lorebook as stored."""
    return dump(studio.book)


@router.put("/lorebook/name")
async def rename_lorebook(body: RenameBook, studio: Studio = Depends(get_studio)):
    """Rename the lorebook."""
    studio.rename_book(body.name)
    return {"name": studio.book.name}


@router.get("/lorebook/export")
async def export_lorebook(studio: Studio = Depends(get_studio)):
    """Download the lorebook as pretty-printed JSON."""
    filename, content = studio.export_lorebook()
    return Response(
        content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/lorebook/import")
async def import_lorebook(request: Request, studio: Studio = Depends(get_studio)):
    """Replace the lorebook with an uploaded JSON file (raw request body)."""
    notification = studio.import_lorebook(await request.body())
    if not notification.ok:
        raise HTTPException(400, notification.message)
    return {"message": notification.message, "selectedId": studio.selected_id}
