"""Core domain models.

Every store operation, storage record and route operates on these types.
Pydantic validates at every data boundary (persisted records, imports,
request bodies). JSON field names are camelCase so that saved and exported
files stay compatible with lorebooks written by the desktop front end.

Models are frozen: a change always produces a new value via model_copy().
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNCATEGORIZED = "Uncategorized"


class EntryType(str, Enum):
    CHARACTER = "CHARACTER"
    LOCATION = "LOCATION"
    ITEM = "ITEM"
    JOURNAL = "JOURNAL"


class AIProvider(str, Enum):
    GEMINI = "GEMINI"
    NOVELAI = "NOVELAI"
    LOCAL = "LOCAL"  # KoboldCpp, LM Studio, Ooba (OpenAI compatible)


AppTheme = Literal["midnight", "nebula", "parchment"]


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class LoreEntry(_Model):
    """A single titled note in the lorebook."""

    id: str
    title: str = ""
    keys: list[str] = Field(default_factory=list)  # activation keywords
    content: str = ""
    category: str = UNCATEGORIZED
    type: EntryType = EntryType.JOURNAL
    image: str | None = None  # data URL / base64, absent when unset
    last_updated: int = 0  # epoch milliseconds


class LoreBook(_Model):
    """The whole user document."""

    name: str = "New World"
    categories: list[str] = Field(default_factory=list)
    entries: list[LoreEntry]

    def get_entry(self, entry_id: str) -> LoreEntry | None:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


class AISettings(_Model):
    provider: AIProvider = AIProvider.GEMINI
    gemini_model_name: str = "gemini-3-flash-preview"
    local_base_url: str = "http://localhost:5001/v1"
    local_model_name: str = "model"
    novel_ai_api_key: str | None = ""
    temperature: float = 0.7
    max_tokens: int = 500


class AppSettings(_Model):
    theme: AppTheme = "midnight"
    ai: AISettings = Field(default_factory=AISettings)


def dump(model: BaseModel) -> dict:
    """JSON-ready dict with camelCase keys and unset optionals omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
