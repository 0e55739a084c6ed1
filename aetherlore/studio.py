"""Studio — the application state behind the editor.

One Studio owns the current LoreBook and AppSettings for the process and is
handed to whoever needs it (the FastAPI app keeps it on app.state). It maps
user intents onto lorebook store operations and provider calls, and keeps
the UI-only state that is never persisted: selection, the pending edit, the
set of entries with a generation in flight, and the last notification.

Flow for every mutation:
  intent → store function (returns a new book) → self.book replaced → record written

Text edits (title, content, keys) are debounced: edit() merges them into a
single PendingEdit and (re)schedules a commit task DEBOUNCE_SECONDS later.
A pending edit is flushed, never dropped, when the selection changes, before
an import, export or generation, and on close().

Generation results are applied by entry id, so a result arriving after the
user navigated elsewhere still lands on the entry it was requested for.
Provider and import failures become an error Notification; the book and
settings are left as they were.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

from . import llm, storage
from .lorebook import (
    CategoryAction,
    ValidationError,
    add_entry,
    delete_entry,
    deserialize,
    export_filename,
    manage_category,
    now_ms,
    parse_keys,
    rename_book,
    serialize,
    update_entry,
)
from .models import AIProvider, AppSettings, LoreBook, LoreEntry

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
LARGE_IMAGE_BYTES = 2_000_000


class EntryNotFound(LookupError):
    """No entry with the given id exists in the current book."""


@dataclass(frozen=True)
class Notification:
    message: str
    kind: Literal["success", "error"]

    @property
    def ok(self) -> bool:
        return self.kind == "success"


@dataclass
class PendingEdit:
    """Uncommitted text edits for one entry. None means "unchanged"."""

    entry_id: str
    title: str | None = None
    content: str | None = None
    keys_text: str | None = None

    def apply_to(self, entry: LoreEntry) -> LoreEntry:
        update: dict[str, Any] = {}
        if self.title is not None and self.title != entry.title:
            update["title"] = self.title
        if self.content is not None and self.content != entry.content:
            update["content"] = self.content
        if self.keys_text is not None:
            keys = parse_keys(self.keys_text)
            if keys != entry.keys:
                update["keys"] = keys
        return entry.model_copy(update=update) if update else entry


class Studio:
    def __init__(
        self,
        book: LoreBook,
        settings: AppSettings,
        *,
        providers: dict[AIProvider, llm.Provider] | None = None,
        debounce: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.book = book
        self.settings = settings
        self.selected_id: str | None = book.entries[0].id if book.entries else None
        self.notification: Notification | None = None
        self._providers = providers
        self._debounce = debounce
        self._pending: PendingEdit | None = None
        self._commit_task: asyncio.Task | None = None
        self._generating: set[str] = set()

    @classmethod
    def from_storage(cls, **kwargs: Any) -> Studio:
        """Load both records (falling back to defaults) and build a Studio."""
        return cls(storage.load_lorebook(), storage.load_settings(), **kwargs)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self, book: LoreBook) -> None:
        if book is self.book:
            return
        self.book = book
        storage.save_lorebook(book)

    def _notify(self, message: str, kind: Literal["success", "error"]) -> Notification:
        self.notification = Notification(message, kind)
        if kind == "error":
            logger.warning("notify: %s", message)
        return self.notification

    def _require(self, entry_id: str) -> LoreEntry:
        entry = self.book.get_entry(entry_id)
        if entry is None:
            raise EntryNotFound(entry_id)
        return entry

    # ------------------------------------------------------------------
    # Selection and debounced edits
    # ------------------------------------------------------------------

    @property
    def selected(self) -> LoreEntry | None:
        return self.draft(self.selected_id) if self.selected_id else None

    @property
    def has_pending_edit(self) -> bool:
        return self._pending is not None

    def draft(self, entry_id: str) -> LoreEntry | None:
        """The entry as the editor shows it: stored value plus any pending edit."""
        entry = self.book.get_entry(entry_id)
        if entry is not None and self._pending and self._pending.entry_id == entry_id:
            return self._pending.apply_to(entry)
        return entry

    def select(self, entry_id: str | None) -> None:
        if entry_id is not None:
            self._require(entry_id)
        if self._pending and self._pending.entry_id != entry_id:
            self.flush()
        self.selected_id = entry_id

    def edit(
        self,
        entry_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
        keys_text: str | None = None,
    ) -> None:
        """Record a keystroke-level edit and restart the debounce timer.

        Must be called from a running event loop.
        """
        self._require(entry_id)
        if self._pending and self._pending.entry_id != entry_id:
            self.flush()
        if self._pending is None:
            self._pending = PendingEdit(entry_id)
        if title is not None:
            self._pending.title = title
        if content is not None:
            self._pending.content = content
        if keys_text is not None:
            self._pending.keys_text = keys_text

        if self._commit_task is not None:
            self._commit_task.cancel()
        self._commit_task = asyncio.get_running_loop().create_task(self._commit_later())

    async def _commit_later(self) -> None:
        await asyncio.sleep(self._debounce)
        self._commit_task = None
        self._commit_pending()

    def _commit_pending(self) -> None:
        pending, self._pending = self._pending, None
        if pending is None:
            return
        entry = self.book.get_entry(pending.entry_id)
        if entry is None:
            return
        edited = pending.apply_to(entry)
        if edited is not entry:
            self._commit(update_entry(self.book, edited.model_copy(update={"last_updated": now_ms()})))

    def flush(self) -> None:
        """Commit the pending edit now, if there is one."""
        if self._commit_task is not None:
            self._commit_task.cancel()
            self._commit_task = None
        self._commit_pending()

    async def close(self) -> None:
        self.flush()

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def add_entry(self) -> str:
        self.flush()
        book, entry_id = add_entry(self.book)
        self._commit(book)
        self.selected_id = entry_id
        return entry_id

    def update_entry(self, entry: LoreEntry) -> LoreEntry:
        """Replace an entry immediately (type, category, image...), bumping last_updated."""
        self._require(entry.id)
        updated = entry.model_copy(update={"last_updated": now_ms()})
        self._commit(update_entry(self.book, updated))
        return updated

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Confirmation is the caller's job; unknown ids are a no-op."""
        if self._pending and self._pending.entry_id == entry_id:
            if self._commit_task is not None:
                self._commit_task.cancel()
                self._commit_task = None
            self._pending = None
        self._commit(delete_entry(self.book, entry_id))
        if self.selected_id == entry_id:
            self.selected_id = None

    def set_image(self, entry_id: str, data: bytes, mime_type: str = "image/png") -> LoreEntry:
        entry = self._require(entry_id)
        if len(data) > LARGE_IMAGE_BYTES:
            self._notify(
                "Image is large and might affect app performance. Recommended size < 1MB.",
                "error",
            )
        encoded = base64.b64encode(data).decode("ascii")
        return self.update_entry(entry.model_copy(update={"image": f"data:{mime_type};base64,{encoded}"}))

    def clear_image(self, entry_id: str) -> LoreEntry:
        entry = self._require(entry_id)
        return self.update_entry(entry.model_copy(update={"image": None}))

    # ------------------------------------------------------------------
    # Book and categories
    # ------------------------------------------------------------------

    def rename_book(self, name: str) -> None:
        self._commit(rename_book(self.book, name))

    def manage_category(self, action: CategoryAction, payload: Any) -> None:
        self.flush()
        self._commit(manage_category(self.book, action, payload))

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_lorebook(self) -> tuple[str, bytes]:
        """Return (download filename, file content)."""
        self.flush()
        filename, content = export_filename(self.book), serialize(self.book)
        self._notify("Lorebook exported successfully", "success")
        return filename, content

    def import_lorebook(self, data: bytes | str) -> Notification:
        """Replace the whole book with an imported one; on failure nothing changes."""
        self.flush()
        try:
            book = deserialize(data)
        except ValidationError as e:
            if isinstance(e.__cause__, (json.JSONDecodeError, UnicodeDecodeError)):
                return self._notify("Failed to parse file", "error")
            logger.warning("rejected import: %s", e)
            return self._notify("Invalid lorebook format", "error")
        self._commit(book)
        self.selected_id = book.entries[0].id if book.entries else None
        return self._notify("Lorebook imported successfully", "success")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def update_settings(self, fields: dict[str, Any]) -> AppSettings:
        self.settings = storage.update_settings(self.settings, fields)
        return self.settings

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def is_generating(self, entry_id: str) -> bool:
        return entry_id in self._generating

    async def generate(self, entry_id: str, instruction: str) -> Notification:
        """Generate text for an entry and append it to the entry's content.

        Only one generation may be in flight per entry; a second request for
        the same entry is refused rather than queued.

        The prompt is built from the content at request time, but the result
        is joined onto the content at apply time: text typed while the request
        ran is kept, and the result goes after it with a blank line between,
        even if the entry was empty when generation started.
        """
        self._require(entry_id)
        if not instruction.strip():
            return self._notify("Describe what you want to generate.", "error")
        if entry_id in self._generating:
            return self._notify("A generation is already running for this entry.", "error")

        if self._pending and self._pending.entry_id == entry_id:
            self.flush()
        context = self._require(entry_id).content

        self._generating.add(entry_id)
        try:
            text = await llm.generate_lore(self.settings.ai, instruction, context, self._providers)
        except llm.GenerationError as e:
            logger.error("generation failed entry=%s: %s", entry_id, e)
            return self._notify(str(e), "error")
        finally:
            self._generating.discard(entry_id)

        # The user may have kept typing in this entry while the request ran.
        if self._pending and self._pending.entry_id == entry_id:
            self.flush()
        entry = self.book.get_entry(entry_id)
        if entry is None:
            return self._notify("The entry was deleted before generation finished.", "error")
        content = f"{entry.content}\n\n{text}" if entry.content else text
        self._commit(update_entry(
            self.book, entry.model_copy(update={"content": content, "last_updated": now_ms()})
        ))
        return self._notify("Generation successful", "success")
