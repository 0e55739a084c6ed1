"""Tests for the settings record, including partial merge."""

import json

import pytest
from pydantic import ValidationError

from aetherlore import storage
from aetherlore.models import AIProvider, AppSettings


def test_load_missing_returns_defaults():
    settings = storage.load_settings()
    assert settings == storage.DEFAULT_SETTINGS
    assert settings.ai.gemini_model_name == "gemini-3-flash-preview"


def test_save_and_load():
    settings = AppSettings(theme="parchment")
    storage.save_settings(settings)
    assert storage.load_settings() == settings


def test_record_uses_camel_case():
    storage.save_settings(AppSettings())
    data = json.loads(storage.settings_path().read_text())
    assert data["ai"]["localBaseUrl"] == "http://localhost:5001/v1"
    assert data["ai"]["maxTokens"] == 500


def test_partial_record_fills_defaults():
    storage.settings_path().write_text('{"theme": "nebula"}')
    settings = storage.load_settings()
    assert settings.theme == "nebula"
    assert settings.ai.provider == AIProvider.GEMINI


def test_malformed_record_falls_back(caplog):
    storage.settings_path().write_text("not json at all")
    assert storage.load_settings() == storage.DEFAULT_SETTINGS
    assert "using defaults" in caplog.text


def test_update_merges_ai_block():
    current = storage.update_settings(AppSettings(), {"ai": {"provider": "NOVELAI", "novelAiApiKey": "pst-1"}})
    current = storage.update_settings(current, {"ai": {"temperature": 1.1}})
    assert current.ai.provider == AIProvider.NOVELAI
    assert current.ai.novel_ai_api_key == "pst-1"
    assert current.ai.temperature == 1.1
    assert storage.load_settings() == current


def test_update_scalar_keeps_ai():
    current = storage.update_settings(AppSettings(), {"ai": {"maxTokens": 900}})
    current = storage.update_settings(current, {"theme": "parchment"})
    assert current.theme == "parchment"
    assert current.ai.max_tokens == 900


def test_invalid_update_not_persisted():
    storage.save_settings(AppSettings())
    with pytest.raises(ValidationError):
        storage.update_settings(AppSettings(), {"ai": {"provider": "OPENAI"}})
    assert storage.load_settings() == AppSettings()


def test_undecodable_record_falls_back(caplog):
    storage.settings_path().write_bytes(b'{"theme": "\xff\xfe"}')
    assert storage.load_settings() == storage.DEFAULT_SETTINGS
    assert "using defaults" in caplog.text


def test_update_accepts_field_names():
    current = storage.update_settings(AppSettings(), {"ai": {"max_tokens": 123, "local_model_name": "llama"}})
    assert current.ai.max_tokens == 123
    assert current.ai.local_model_name == "llama"
    assert storage.load_settings() == current


def test_update_rejects_unknown_keys():
    storage.save_settings(AppSettings())
    with pytest.raises(ValidationError) as exc:
        storage.update_settings(AppSettings(), {"ai": {"maxTokenz": 9}, "colour": "red"})
    locs = {err["loc"] for err in exc.value.errors()}
    assert locs == {("ai", "maxTokenz"), ("colour",)}
    assert storage.load_settings() == AppSettings()
