"""Tests for settings and the error taxonomy."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as SettingsValidationError

from .errors import ErrorCode, LLMError, StorageError, ValidationError
from .settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test generation defaults match the assistant configuration panel."""
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.ollama_model == "gemma3:1b"
    assert settings.default_temperature == 0.01
    assert settings.default_top_p == 0.9
    assert settings.default_max_tokens == 1000
    assert settings.gate_empty_terms_policy == "strict"
    assert settings.reference_title_mode == "lenient"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test environment variables override defaults case-insensitively."""
    monkeypatch.setenv("KNOWLEDGE_BASE_DIR", "/srv/kb")
    monkeypatch.setenv("ollama_url", "http://gpu-box:11434")
    settings = Settings(_env_file=None)
    assert settings.knowledge_base_dir == Path("/srv/kb")
    assert settings.ollama_url == "http://gpu-box:11434"


def test_settings_reject_unknown_modes(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test unknown gate and title modes fail when settings load."""
    monkeypatch.setenv("GATE_EMPTY_TERMS_POLICY", "sometimes")
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None)

    monkeypatch.setenv("GATE_EMPTY_TERMS_POLICY", "permissive")
    monkeypatch.setenv("REFERENCE_TITLE_MODE", "fuzzy")
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None)

    monkeypatch.setenv("REFERENCE_TITLE_MODE", "strict")
    settings = Settings(_env_file=None)
    assert settings.gate_empty_terms_policy == "permissive"
    assert settings.reference_title_mode == "strict"


def test_error_to_dict() -> None:
    """Test errors serialize code, message, and details."""
    error = StorageError("Knowledge base entry not found: x.html", {"identifier": "x.html"}, ErrorCode.NOT_FOUND)
    assert error.to_dict() == {
        "code": "NOT_FOUND",
        "message": "Knowledge base entry not found: x.html",
        "details": {"identifier": "x.html"},
    }
    assert str(error).startswith("[NOT_FOUND]")


def test_error_default_codes() -> None:
    assert LLMError("down").code == ErrorCode.LLM_UNAVAILABLE
    assert StorageError("io").code == ErrorCode.STORAGE_READ_FAILED
    assert ValidationError("bad").code == ErrorCode.VALIDATION_ERROR
