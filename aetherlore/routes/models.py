"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RenameBook(_Body):
    name: str


class SelectEntry(_Body):
    entry_id: str | None = None


class DraftEdit(_Body):
    title: str | None = None
    content: str | None = None
    keys: str | None = None  # comma-separated, as typed


class GenerateBody(_Body):
    prompt: str


class CreateCategory(_Body):
    name: str


class RenameCategory(_Body):
    new_name: str
