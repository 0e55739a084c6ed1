"""Lorebook document store.

Pure transformations over a LoreBook value: every operation takes the current
book and returns a new one, never touching its input. The Studio owns the
current value and persists whatever these functions return.

Category rules:
  add     — appended when absent, duplicates silently ignored.
  delete  — removed from the list; entries in it move to "Uncategorized".
  rename  — replaced at the same position; entries follow the new name.
            Renaming onto an existing name leaves both list slots in place.

serialize()/deserialize() produce and accept the pretty-printed JSON used both
for the durable record and for file export.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from .models import UNCATEGORIZED, EntryType, LoreBook, LoreEntry

CategoryAction = Literal["add", "delete", "rename"]


class ValidationError(ValueError):
    """Raised when a lorebook payload is malformed or has the wrong shape."""


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _new_entry_id(existing: set[str]) -> str:
    while True:
        entry_id = f"entry-{uuid.uuid4().hex[:12]}"
        if entry_id not in existing:
            return entry_id


# ── Entries ─────────────────────────────────────────────────


def add_entry(book: LoreBook) -> tuple[LoreBook, str]:
    """Append a blank journal entry. Returns (new book, new entry id)."""
    entry_id = _new_entry_id({e.id for e in book.entries})
    entry = LoreEntry(
        id=entry_id,
        title="New Entry",
        keys=[],
        content="",
        category=UNCATEGORIZED,
        type=EntryType.JOURNAL,
        last_updated=now_ms(),
    )
    return book.model_copy(update={"entries": [*book.entries, entry]}), entry_id


def update_entry(book: LoreBook, entry: LoreEntry) -> LoreBook:
    """Replace the entry with the same id. Unknown ids leave the book as is.

    The caller bumps last_updated.
    """
    if book.get_entry(entry.id) is None:
        return book
    entries = [entry if e.id == entry.id else e for e in book.entries]
    return book.model_copy(update={"entries": entries})


def delete_entry(book: LoreBook, entry_id: str) -> LoreBook:
    if book.get_entry(entry_id) is None:
        return book
    entries = [e for e in book.entries if e.id != entry_id]
    return book.model_copy(update={"entries": entries})


def rename_book(book: LoreBook, name: str) -> LoreBook:
    return book.model_copy(update={"name": name})


# ── Categories ──────────────────────────────────────────────


def add_category(book: LoreBook, name: str) -> LoreBook:
    if name in book.categories:
        return book
    return book.model_copy(update={"categories": [*book.categories, name]})


def delete_category(book: LoreBook, name: str) -> LoreBook:
    categories = list(book.categories)
    if name in categories:
        categories.remove(name)
    entries = [
        e.model_copy(update={"category": UNCATEGORIZED}) if e.category == name else e
        for e in book.entries
    ]
    return book.model_copy(update={"categories": categories, "entries": entries})


def rename_category(book: LoreBook, old_name: str, new_name: str) -> LoreBook:
    categories = list(book.categories)
    if old_name in categories:
        categories[categories.index(old_name)] = new_name
    entries = [
        e.model_copy(update={"category": new_name}) if e.category == old_name else e
        for e in book.entries
    ]
    return book.model_copy(update={"categories": categories, "entries": entries})


def _rename_payload(book: LoreBook, payload: Any) -> LoreBook:
    if isinstance(payload, Mapping):
        old_name = payload.get("oldName", payload.get("old_name"))
        new_name = payload.get("newName", payload.get("new_name"))
    else:
        old_name, new_name = payload
    if not isinstance(old_name, str) or not isinstance(new_name, str):
        raise ValueError("rename needs oldName and newName")
    return rename_category(book, old_name, new_name)


_CATEGORY_ACTIONS: dict[str, Callable[[LoreBook, Any], LoreBook]] = {
    "add": add_category,
    "delete": delete_category,
    "rename": _rename_payload,
}


def manage_category(book: LoreBook, action: CategoryAction, payload: Any) -> LoreBook:
    """Apply a category action in a single step over the whole book.

    payload is the category name for add/delete, and either
    {"oldName": ..., "newName": ...} or an (old, new) pair for rename.
    """
    try:
        handler = _CATEGORY_ACTIONS[action]
    except KeyError:
        raise ValueError(f"Unknown category action: {action!r}") from None
    return handler(book, payload)


# ── Sidebar helpers ─────────────────────────────────────────


def search_entries(book: LoreBook, term: str) -> list[LoreEntry]:
    """Case-insensitive substring match on title or any activation key."""
    if not term:
        return list(book.entries)
    needle = term.lower()
    return [
        e for e in book.entries
        if needle in e.title.lower() or any(needle in k.lower() for k in e.keys)
    ]


def display_category(book: LoreBook, entry: LoreEntry) -> str:
    """Category an entry is shown under; unknown categories fall back to Uncategorized."""
    if entry.category and entry.category in book.categories:
        return entry.category
    return UNCATEGORIZED


def group_by_category(
    book: LoreBook, entries: list[LoreEntry] | None = None
) -> dict[str, list[LoreEntry]]:
    """Group entries by display category, in category-list order.

    Every book category gets a (possibly empty) group; "Uncategorized" is last.
    """
    groups: dict[str, list[LoreEntry]] = {c: [] for c in book.categories}
    groups.setdefault(UNCATEGORIZED, [])
    for entry in book.entries if entries is None else entries:
        groups[display_category(book, entry)].append(entry)
    return groups


def parse_keys(text: str) -> list[str]:
    """Editor keys field: "spire, crystal , ,tower" → ["spire", "crystal", "tower"]."""
    return [k.strip() for k in text.split(",") if k.strip()]


def format_keys(keys: list[str]) -> str:
    return ", ".join(keys)


# ── Serialization ───────────────────────────────────────────


def serialize(book: LoreBook) -> bytes:
    """Pretty-printed JSON, used for the durable record and for export."""
    return book.model_dump_json(indent=2, by_alias=True, exclude_none=True).encode("utf-8")


def deserialize(data: bytes | str) -> LoreBook:
    """Parse a lorebook payload.

    Raises ValidationError unless the payload is a JSON object whose
    "entries" field is a list of valid entries with distinct ids. Nothing is
    partially accepted.
    """
    try:
        raw = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Lorebook is not valid JSON: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("entries"), list):
        raise ValidationError("Lorebook must be an object with an 'entries' list")
    try:
        book = LoreBook.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid lorebook: {e.error_count()} field error(s)") from e
    seen: set[str] = set()
    for entry in book.entries:
        if entry.id in seen:
            raise ValidationError(f"Duplicate entry id: {entry.id!r}")
        seen.add(entry.id)
    return book


def export_filename(book: LoreBook) -> str:
    """Download name: "The Shattered Isles" → the_shattered_isles_lorebook.json"""
    stem = re.sub(r"\s+", "_", book.name).lower()
    return f"{stem}_lorebook.json"
