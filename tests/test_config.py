"""Tests for config module.

Tests credential validation and environment-driven settings.
"""

import os

import pytest

from docforge.config import (
    get_api_key,
    get_audit_log_path,
    get_explain_model,
    get_llm_timeout,
    get_max_retries,
    get_min_code_length,
    get_model,
    get_provider_from_model,
    get_temperature,
    is_valid_model_string,
    validate_credentials,
)
from docforge.constants import (
    DEFAULT_EXPLAIN_MODEL,
    DEFAULT_LLM_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MIN_CODE_LENGTH,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
)


class TestGetApiKey:
    """Tests for get_api_key function."""

    def test_returns_value_when_set(self, mocker):
        """Returns the key when the provider variable is set."""
        mocker.patch.dict(os.environ, {"OPENAI_API_KEY": "valid-key-123"}, clear=True)
        assert get_api_key("openai") == "valid-key-123"

    def test_returns_none_when_not_set(self, mocker):
        """Returns None when the provider variable is unset."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_api_key("openai") is None

    def test_strips_whitespace(self, mocker):
        """Surrounding whitespace and CRLF residue are stripped."""
        mocker.patch.dict(os.environ, {"ANTHROPIC_API_KEY": "key-1\r\n"}, clear=True)
        assert get_api_key("anthropic") == "key-1"

    def test_blank_key_is_missing(self, mocker):
        """A whitespace-only key counts as missing."""
        mocker.patch.dict(os.environ, {"OPENAI_API_KEY": "   "}, clear=True)
        assert get_api_key("openai") is None

    def test_gemini_falls_back_to_google_key(self, mocker):
        """Gemini uses GOOGLE_API_KEY when GEMINI_API_KEY is unset."""
        mocker.patch.dict(os.environ, {"GOOGLE_API_KEY": "g-key"}, clear=True)
        assert get_api_key("gemini") == "g-key"

    def test_gemini_key_preferred(self, mocker):
        """GEMINI_API_KEY wins over GOOGLE_API_KEY."""
        mocker.patch.dict(
            os.environ,
            {"GEMINI_API_KEY": "gem-key", "GOOGLE_API_KEY": "g-key"},
            clear=True,
        )
        assert get_api_key("gemini") == "gem-key"

    def test_local_provider(self, mocker):
        """Local providers report a placeholder key."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_api_key("ollama") == "local"

    def test_unknown_provider(self, mocker):
        """Unknown providers have no key."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_api_key("nonexistent") is None


class TestModelSettings:
    """Tests for model selection accessors."""

    def test_default_model(self, mocker):
        """Without overrides the default models are used."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_model() == DEFAULT_MODEL
        assert get_explain_model() == DEFAULT_EXPLAIN_MODEL

    def test_model_override(self, mocker):
        """Model variables override the defaults after stripping."""
        mocker.patch.dict(
            os.environ,
            {
                "DOCFORGE_MODEL": " openai/gpt-4o ",
                "DOCFORGE_EXPLAIN_MODEL": "anthropic/claude-3-haiku-20240307",
            },
            clear=True,
        )
        assert get_model() == "openai/gpt-4o"
        assert get_explain_model() == "anthropic/claude-3-haiku-20240307"

    def test_provider_from_model(self):
        """The provider is the part before the first slash."""
        assert get_provider_from_model("gemini/gemini-2.5-flash") == "gemini"
        assert get_provider_from_model("openai/gpt-4o") == "openai"
        assert get_provider_from_model("gpt-4o") == "gpt-4o"

    @pytest.mark.parametrize(
        "model,expected",
        [
            ("gemini/gemini-2.5-flash", True),
            ("openai/gpt-4o", True),
            ("gpt-4o", False),
            ("/gpt-4o", False),
            ("openai/", False),
        ],
    )
    def test_is_valid_model_string(self, model, expected):
        """Model strings need a provider and a model name."""
        assert is_valid_model_string(model) is expected


class TestNumericSettings:
    """Tests for integer and float settings with fallbacks."""

    def test_defaults(self, mocker):
        """Without overrides the numeric defaults are used."""
        mocker.patch.dict(os.environ, {}, clear=True)
        assert get_llm_timeout() == DEFAULT_LLM_TIMEOUT
        assert get_max_retries() == DEFAULT_MAX_RETRIES
        assert get_min_code_length() == DEFAULT_MIN_CODE_LENGTH
        assert get_temperature() == DEFAULT_TEMPERATURE

    def test_valid_overrides(self, mocker):
        """Valid numeric overrides are honored."""
        mocker.patch.dict(
            os.environ,
            {
                "DOCFORGE_LLM_TIMEOUT": "30",
                "DOCFORGE_MAX_RETRIES": "5",
                "DOCFORGE_MIN_CODE_LENGTH": "10",
                "DOCFORGE_TEMPERATURE": "0.7",
            },
            clear=True,
        )
        assert get_llm_timeout() == 30
        assert get_max_retries() == 5
        assert get_min_code_length() == 10
        assert get_temperature() == 0.7

    @pytest.mark.parametrize("raw", ["0", "-3", "abc", "1.5", ""])
    def test_invalid_int_falls_back(self, mocker, raw):
        """Non-positive or non-integer values fall back to the default."""
        mocker.patch.dict(os.environ, {"DOCFORGE_LLM_TIMEOUT": raw}, clear=True)
        assert get_llm_timeout() == DEFAULT_LLM_TIMEOUT

    @pytest.mark.parametrize("raw", ["-0.1", "2.5", "hot"])
    def test_invalid_temperature_falls_back(self, mocker, raw):
        """Out-of-range or non-numeric temperatures fall back to the default."""
        mocker.patch.dict(os.environ, {"DOCFORGE_TEMPERATURE": raw}, clear=True)
        assert get_temperature() == DEFAULT_TEMPERATURE


class TestAuditLogPath:
    """Tests for get_audit_log_path function."""

    def test_default_expands_home(self, mocker):
        """The default audit path lives under the home directory."""
        mocker.patch.dict(os.environ, {"HOME": "/home/tester"}, clear=True)
        assert get_audit_log_path() == "/home/tester/.docforge/audit.log"

    def test_override(self, mocker):
        """DOCFORGE_AUDIT_LOG overrides the audit path."""
        mocker.patch.dict(os.environ, {"DOCFORGE_AUDIT_LOG": "/tmp/x.log"}, clear=True)
        assert get_audit_log_path() == "/tmp/x.log"


class TestValidateCredentials:
    """Tests for validate_credentials function."""

    def test_valid_with_key(self, mocker):
        """A configured key validates and names the model."""
        mocker.patch.dict(os.environ, {"GEMINI_API_KEY": "test-key"}, clear=True)
        is_valid, message = validate_credentials()
        assert is_valid is True
        assert DEFAULT_MODEL in message

    def test_missing_key_message_has_instructions(self, mocker):
        """A missing key message tells the user what to export."""
        mocker.patch.dict(os.environ, {}, clear=True)
        is_valid, message = validate_credentials()
        assert is_valid is False
        assert "No API key configured for provider 'gemini'" in message
        assert 'export GEMINI_API_KEY="your-key-here"' in message
        assert 'export GOOGLE_API_KEY="your-key-here"' in message

    def test_unknown_provider_suggests_env_var(self, mocker):
        """An unlisted provider gets a guessed variable name."""
        mocker.patch.dict(os.environ, {}, clear=True)
        is_valid, message = validate_credentials("mistral/mistral-large")
        assert is_valid is False
        assert "MISTRAL_API_KEY" in message

    def test_invalid_model_format(self, mocker):
        """A model without a provider prefix is rejected."""
        mocker.patch.dict(os.environ, {"DOCFORGE_MODEL": "gpt-4o"}, clear=True)
        is_valid, message = validate_credentials()
        assert is_valid is False
        assert "Invalid model format" in message

    def test_local_provider_needs_no_key(self, mocker):
        """Local providers validate without a key."""
        mocker.patch.dict(os.environ, {}, clear=True)
        is_valid, _ = validate_credentials("ollama/llama3")
        assert is_valid is True
