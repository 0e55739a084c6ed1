"""Per-type editor layout, dispatched on EntryType.

Each entry type maps to the image slot the editor shows next to the text:
locations get a wide banner above it, characters a 3:4 portrait, items a
square icon, journals no image at all. Adding a type means adding a row here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from .models import EntryType, LoreEntry

ImageSlot = Literal["banner", "portrait", "icon"]


@dataclass(frozen=True)
class EntryLayout:
    image_slot: ImageSlot | None
    upload_label: str = ""
    aspect: str = ""


LAYOUTS: dict[EntryType, EntryLayout] = {
    EntryType.LOCATION: EntryLayout("banner", "Upload Location Banner", "wide"),
    EntryType.CHARACTER: EntryLayout("portrait", "Upload Portrait", "3:4"),
    EntryType.ITEM: EntryLayout("icon", "Upload Icon", "1:1"),
    EntryType.JOURNAL: EntryLayout(None),
}


def layout_for(entry: LoreEntry) -> EntryLayout:
    return LAYOUTS[entry.type]


def describe(entry: LoreEntry) -> dict[str, Any]:
    """Layout as a JSON-ready dict, including whether an image is set."""
    layout = layout_for(entry)
    return {
        "imageSlot": layout.image_slot,
        "uploadLabel": layout.upload_label,
        "aspect": layout.aspect,
        "hasImage": layout.image_slot is not None and bool(entry.image),
    }
