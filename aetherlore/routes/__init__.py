"""FastAPI API endpoints under /api.

Endpoint groups: lorebook (read, rename, import/export), entries (CRUD,
drafts, images, generation), selection, categories, settings, health.
All endpoints act on the Studio stored on app.state.
"""

from fastapi import APIRouter

from .categories import router as categories_router
from .entries import router as entries_router
from .lorebook import router as lorebook_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(lorebook_router)
router.include_router(entries_router)
router.include_router(categories_router)
