"""Unit tests for configuration, logging and prompts."""
import pytest
from loguru import logger

from clinscribe.config import DEFAULT_MODEL_ID, load_settings
from clinscribe.log import configure_logging, resolve_level
from clinscribe.prompts import (
    OFFICE_VISIT,
    SCRIBE_SYSTEM,
    clear_cache,
    load_prompt,
    render_prompt,
    template_variables,
)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.provider == "openai"
        assert settings.host_api_key is None
        assert settings.default_model_id == DEFAULT_MODEL_ID
        assert settings.temperature == 1.0
        assert settings.store_backend == "sqlite"

    def test_provider_key_and_model(self):
        """Test that the key variable follows the provider."""
        settings = load_settings({
            "LLM_PROVIDER": "DeepSeek",
            "DEEPSEEK_API_KEY": "sk-ds",
            "OPENAI_API_KEY": "sk-oa",
        })

        assert settings.provider == "deepseek"
        assert settings.host_api_key == "sk-ds"
        assert settings.default_model_id == "deepseek-chat"

    def test_empty_default_model_disables_it(self):
        assert load_settings({"CLINSCRIBE_DEFAULT_MODEL": " "}).default_model_id is None

    def test_invalid_temperature(self):
        with pytest.raises(ValueError):
            load_settings({"CLINSCRIBE_TEMPERATURE": "3"})


class TestLogging:
    """Tests for resolve_level and configure_logging."""

    def test_resolve_level(self):
        assert resolve_level("DEBUG") == "DEBUG"
        assert resolve_level(" error ") == "ERROR"
        assert resolve_level("nonsense") == "WARNING"

    def test_configure_logging_returns_handler(self):
        handler_id = configure_logging("debug")
        try:
            assert isinstance(handler_id, int)
        finally:
            logger.remove(handler_id)


class TestPrompts:
    """Tests for prompt loading and rendering."""

    def test_packaged_prompts_exist(self):
        assert "Clinical Document" in load_prompt(SCRIBE_SYSTEM)
        assert template_variables(load_prompt(SCRIBE_SYSTEM)) == ["sign_off", "transcript"]
        assert template_variables(load_prompt(OFFICE_VISIT)) == ["transcription"]

    def test_missing_prompt(self):
        with pytest.raises(FileNotFoundError):
            load_prompt("does_not_exist")

    def test_render_requires_all_variables(self):
        with pytest.raises(KeyError):
            render_prompt(SCRIBE_SYSTEM, sign_off="Dr. A")

    def test_local_override(self, tmp_path, monkeypatch):
        """Test that ./prompts/<name>.txt wins over the packaged file."""
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / f"{OFFICE_VISIT}.txt").write_text("Visit: {transcription}")
        monkeypatch.chdir(tmp_path)
        clear_cache()
        try:
            assert render_prompt(OFFICE_VISIT, transcription="cough") == "Visit: cough"
        finally:
            clear_cache()

    def test_transcript_braces_are_preserved(self):
        """Test that values containing braces are inserted verbatim."""
        rendered = render_prompt(SCRIBE_SYSTEM, sign_off="Dr. A", transcript="BP {120/80}")
        assert "BP {120/80}" in rendered
