"""Tests for aetherlore.models."""

import json

import pytest
from pydantic import ValidationError

from aetherlore.models import (
    AIProvider,
    AISettings,
    AppSettings,
    EntryType,
    LoreBook,
    LoreEntry,
    dump,
)


class TestLoreEntry:
    def test_defaults(self) -> None:
        e = LoreEntry(id="e1")
        assert e.title == ""
        assert e.keys == []
        assert e.category == "Uncategorized"
        assert e.type == EntryType.JOURNAL
        assert e.image is None
        assert e.last_updated == 0

    def test_accepts_camel_case_fields(self) -> None:
        e = LoreEntry.model_validate({"id": "e1", "lastUpdated": 1700000000000})
        assert e.last_updated == 1700000000000

    def test_dump_uses_camel_case_and_omits_missing_image(self) -> None:
        data = dump(LoreEntry(id="e1", last_updated=5))
        assert data["lastUpdated"] == 5
        assert "image" not in data
        assert data["type"] == "JOURNAL"

    def test_invalid_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoreEntry.model_validate({"id": "e1", "type": "SPELL"})

    def test_frozen(self) -> None:
        e = LoreEntry(id="e1")
        with pytest.raises(ValidationError):
            e.title = "changed"


class TestLoreBook:
    def test_entries_required(self) -> None:
        with pytest.raises(ValidationError):
            LoreBook.model_validate({"name": "W"})

    def test_get_entry(self) -> None:
        book = LoreBook(entries=[LoreEntry(id="a"), LoreEntry(id="b")])
        assert book.get_entry("b").id == "b"
        assert book.get_entry("zzz") is None


class TestSettings:
    def test_defaults(self) -> None:
        s = AppSettings()
        assert s.theme == "midnight"
        assert s.ai.provider == AIProvider.GEMINI
        assert s.ai.local_base_url == "http://localhost:5001/v1"
        assert s.ai.temperature == 0.7
        assert s.ai.max_tokens == 500

    def test_invalid_theme_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppSettings.model_validate({"theme": "neon"})

    def test_json_shape(self) -> None:
        data = json.loads(json.dumps(dump(AppSettings(ai=AISettings(provider=AIProvider.LOCAL)))))
        assert data["ai"]["provider"] == "LOCAL"
        assert data["ai"]["localModelName"] == "model"
        assert data["ai"]["maxTokens"] == 500
        assert data["ai"]["novelAiApiKey"] == ""
