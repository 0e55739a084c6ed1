"""Category endpoints."""

from fastapi import APIRouter, Depends

from aetherlore.studio import Studio

from .deps import get_studio
from .models import CreateCategory, RenameCategory

router = APIRouter()


@router.post("/categories", status_code=201)
async def add_category(body: CreateCategory, studio: Studio = Depends(get_studio)):
    """Add a category; an existing name is ignored."""
    studio.manage_category("add", body.name)
    return studio.book.categories


@router.delete("/categories/{name}")
async def delete_category(name: str, studio: Studio = Depends(get_studio)):
    """Delete a category. Its entries move to Uncategorized."""
    studio.manage_category("delete", name)
    return studio.book.categories


@router.patch("/categories/{name}")
async def rename_category(name: str, body: RenameCategory, studio: Studio = Depends(get_studio)):
    """Rename a category in place; its entries follow."""
    studio.manage_category("rename", {"oldName": name, "newName": body.new_name})
    return studio.book.categories
