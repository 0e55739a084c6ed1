"""App settings record (theme + AI provider settings)."""

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from aetherlore.models import AppSettings, dump

from .core import settings_path

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = AppSettings()


def load_settings() -> AppSettings:
    """Read stored settings, or the defaults if missing or malformed.

    Fields absent from the stored record take their default values.
    """
    path = settings_path()
    if not path.is_file():
        return DEFAULT_SETTINGS
    try:
        return AppSettings.model_validate_json(path.read_bytes())
    except (ValidationError, UnicodeDecodeError) as e:
        logger.warning("Stored settings at %s are unusable, using defaults: %s", path, e)
        return DEFAULT_SETTINGS


def save_settings(settings: AppSettings) -> None:
    settings_path().write_text(json.dumps(dump(settings), indent=2))


def _merge(model: type[BaseModel], current: dict, fields: dict[str, Any], loc: tuple = ()) -> list[dict]:
    """Merge fields into current (a by-alias dump of model) in place.

    Keys may be given by alias ("maxTokens") or field name ("max_tokens").
    Nested model fields merge key-by-key. Returns line errors for unknown keys.
    """
    fields_by_key = {}
    for name, info in model.model_fields.items():
        fields_by_key[name] = fields_by_key[info.alias or name] = (info.alias or name, info)
    errors = []
    for key, value in fields.items():
        if key not in fields_by_key:
            errors.append({"type": "extra_forbidden", "loc": (*loc, key), "input": value})
            continue
        alias, info = fields_by_key[key]
        nested = info.annotation
        if isinstance(nested, type) and issubclass(nested, BaseModel) and isinstance(value, dict):
            errors += _merge(nested, current.setdefault(alias, {}), value, (*loc, alias))
        else:
            current[alias] = value
    return errors


def update_settings(current: AppSettings, fields: dict[str, Any]) -> AppSettings:
    """Merge fields into current settings, validate and persist. Returns the result.

    "ai" is merged key-by-key; other keys are overwritten. Raises pydantic's
    ValidationError (nothing written) for unknown keys or if the merged
    settings are invalid.
    """
    merged = dump(current)
    errors = _merge(AppSettings, merged, fields)
    if errors:
        raise ValidationError.from_exception_data(AppSettings.__name__, errors)
    settings = AppSettings.model_validate(merged)
    save_settings(settings)
    return settings
