"""Entry CRUD, debounced drafts, images, selection and generation."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from aetherlore import layouts
from aetherlore.lorebook import format_keys, group_by_category, search_entries
from aetherlore.models import LoreEntry, dump
from aetherlore.studio import EntryNotFound, Studio

from .deps import entry_or_404, get_studio
from .models import DraftEdit, GenerateBody, SelectEntry

router = APIRouter()


def _entry_view(studio: Studio, entry: LoreEntry) -> dict[str, Any]:
    return {
        **dump(entry),
        "keysText": format_keys(entry.keys),
        "layout": layouts.describe(entry),
        "generating": studio.is_generating(entry.id),
    }


@router.get("/entries")
async def list_entries(search: str = "", studio: Studio = Depends(get_studio)):
    """Entries matching `search`, grouped by display category (sidebar order)."""
    groups = group_by_category(studio.book, search_entries(studio.book, search))
    return [
        {
            "category": category,
            "entries": [{"id": e.id, "title": e.title, "type": e.type.value} for e in entries],
        }
        for category, entries in groups.items()
    ]


@router.post("/entries", status_code=201)
async def create_entry(studio: Studio = Depends(get_studio)):
    """Add a blank entry and select it."""
    entry_id = studio.add_entry()
    return _entry_view(studio, studio.book.get_entry(entry_id))


@router.get("/entries/{entry_id}")
async def get_entry(entry_id: str, studio: Studio = Depends(get_studio)):
    """Get an entry as the editor shows it, including any unsaved draft."""
    return _entry_view(studio, entry_or_404(studio, entry_id))


@router.put("/entries/{entry_id}")
async def replace_entry(entry_id: str, body: LoreEntry, studio: Studio = Depends(get_studio)):
    """Replace an entry immediately (type, category and other non-text fields)."""
    if body.id != entry_id:
        raise HTTPException(400, "Entry id does not match the URL")
    try:
        entry = studio.update_entry(body)
    except EntryNotFound:
        raise HTTPException(404, "Entry not found")
    return _entry_view(studio, entry)


@router.patch("/entries/{entry_id}/draft")
async def edit_draft(entry_id: str, body: DraftEdit, studio: Studio = Depends(get_studio)):
    """Record typed title/content/keys; committed after a quiet period."""
    try:
        studio.edit(entry_id, title=body.title, content=body.content, keys_text=body.keys)
    except EntryNotFound:
        raise HTTPException(404, "Entry not found")
    return _entry_view(studio, studio.draft(entry_id))


@router.delete("/entries/{entry_id}", status_code=204)
async def delete_entry(entry_id: str, studio: Studio = Depends(get_studio)):
    """Delete an entry. The client asks for confirmation first."""
    entry_or_404(studio, entry_id)
    studio.delete_entry(entry_id)


@router.put("/entries/{entry_id}/image")
async def upload_image(entry_id: str, request: Request, studio: Studio = Depends(get_studio)):
    """Attach an image (raw body, Content-Type gives the mime type)."""
    entry_or_404(studio, entry_id)
    data = await request.body()
    if not data:
        raise HTTPException(400, "Empty image")
    mime_type = request.headers.get("content-type", "image/png")
    return _entry_view(studio, studio.set_image(entry_id, data, mime_type))


@router.delete("/entries/{entry_id}/image")
async def remove_image(entry_id: str, studio: Studio = Depends(get_studio)):
    entry_or_404(studio, entry_id)
    return _entry_view(studio, studio.clear_image(entry_id))


@router.post("/entries/{entry_id}/generate")
async def generate(entry_id: str, body: GenerateBody, studio: Studio = Depends(get_studio)):
    """Generate lore for an entry with the configured provider."""
    entry_or_404(studio, entry_id)
    busy = studio.is_generating(entry_id)
    notification = await studio.generate(entry_id, body.prompt)
    if not notification.ok:
        if busy:
            raise HTTPException(409, notification.message)
        if not body.prompt.strip():
            raise HTTPException(400, notification.message)
        raise HTTPException(502, notification.message)
    return _entry_view(studio, studio.book.get_entry(entry_id))


@router.get("/selection")
async def get_selection(studio: Studio = Depends(get_studio)):
    selected = studio.selected
    return {"entryId": studio.selected_id, "entry": _entry_view(studio, selected) if selected else None}


@router.put("/selection")
async def set_selection(body: SelectEntry, studio: Studio = Depends(get_studio)):
    """Select an entry (or none). A pending draft for the previous entry is saved."""
    try:
        studio.select(body.entry_id)
    except EntryNotFound:
        raise HTTPException(404, "Entry not found")
    return {"entryId": studio.selected_id}
