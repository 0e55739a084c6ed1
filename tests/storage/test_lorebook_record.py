"""Tests for the lorebook record."""

import json

from aetherlore import storage
from aetherlore.models import LoreBook, LoreEntry


def test_load_missing_returns_default():
    book = storage.load_lorebook()
    assert book.name == "New World"
    assert book.categories == ["Characters", "Locations", "History", "Items", "Factions"]
    assert [e.title for e in book.entries] == ["The Crystal Spire"]
    assert book.entries[0].last_updated > 0


def test_save_and_load():
    book = LoreBook(name="Aether", categories=["A"], entries=[LoreEntry(id="1", keys=["x"], category="A")])
    storage.save_lorebook(book)
    assert storage.load_lorebook() == book


def test_saved_record_is_readable_json():
    storage.save_lorebook(LoreBook(name="Aether", entries=[]))
    data = json.loads(storage.lorebook_path().read_text())
    assert data == {"name": "Aether", "categories": [], "entries": []}


def test_save_overwrites():
    storage.save_lorebook(LoreBook(name="A", entries=[]))
    storage.save_lorebook(LoreBook(name="B", entries=[]))
    assert storage.load_lorebook().name == "B"


def test_malformed_record_falls_back_to_default(caplog):
    storage.lorebook_path().write_text("{broken")
    book = storage.load_lorebook()
    assert book.name == "New World"
    assert "using defaults" in caplog.text


def test_wrong_shape_record_falls_back_to_default():
    storage.lorebook_path().write_text('{"name": "No entries"}')
    assert storage.load_lorebook().name == "New World"
