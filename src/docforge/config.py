"""Configuration module.

Loads API keys and settings from environment variables.

Environment Variables
---------------------
GEMINI_API_KEY / GOOGLE_API_KEY : str
    API key for Google AI Studio (the default provider).
    Get one at: https://aistudio.google.com/apikey

OPENAI_API_KEY, ANTHROPIC_API_KEY, ... : str
    Keys for other litellm providers, if DOCFORGE_MODEL points at one.

DOCFORGE_MODEL : str
    Model used for document analysis (format: provider/model-name).
    Default: gemini/gemini-3-pro-preview

DOCFORGE_EXPLAIN_MODEL : str
    Model used for code explanations.
    Default: gemini/gemini-2.5-flash

DOCFORGE_LLM_TIMEOUT : int
    Per-request timeout in seconds. Default: 120

DOCFORGE_MAX_RETRIES : int
    Attempts for a model call that fails with an internal (5xx) error.
    Default: 3

DOCFORGE_TEMPERATURE : float
    Sampling temperature for analysis requests. Default: 0.2

DOCFORGE_MIN_CODE_LENGTH : int
    Fuzzy-extracted code shorter than this falls back to locating the
    function declaration directly. Default: 50

DOCFORGE_AUDIT_LOG : str
    Path of the JSON-lines audit trail. Default: ~/.docforge/audit.log
"""

import logging
import os

from docforge.constants import (
    DEFAULT_EXPLAIN_MODEL,
    DEFAULT_LLM_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MIN_CODE_LENGTH,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
)

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_LOG = os.path.join("~", ".docforge", "audit.log")

# Providers that run locally and don't require API keys
LOCAL_PROVIDERS = {"ollama"}

# Provider -> env var(s) mapping. Tuples mean "try in order".
PROVIDER_ENV_VARS: dict[str, str | tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "groq": "GROQ_API_KEY",
    "together_ai": "TOGETHERAI_API_KEY",
}


def get_api_key(provider: str) -> str | None:
    """Get the API key for a provider from environment.

    Args:
        provider: Provider name (e.g., "gemini", "openai", "ollama").

    Returns:
        The API key string, "local" for local providers, or None if not set.
    """
    if provider.lower() in LOCAL_PROVIDERS:
        return "local"

    lookup = PROVIDER_ENV_VARS.get(provider.lower())
    if lookup is None:
        return None
    names = (lookup,) if isinstance(lookup, str) else lookup
    for env_var in names:
        key = os.environ.get(env_var)
        if key and key.strip():
            return key.strip()
    return None


def get_model() -> str:
    """Get the analysis model, falling back to the default if unset."""
    model = os.environ.get("DOCFORGE_MODEL", "")
    if model and model.strip():
        return model.strip()
    return DEFAULT_MODEL


def get_explain_model() -> str:
    """Get the code-explanation model, falling back to the default if unset."""
    model = os.environ.get("DOCFORGE_EXPLAIN_MODEL", "")
    if model and model.strip():
        return model.strip()
    return DEFAULT_EXPLAIN_MODEL


def get_llm_timeout() -> int:
    """Get the model request timeout in seconds.

    Reads from DOCFORGE_LLM_TIMEOUT environment variable.
    Default: 120 seconds.

    Returns:
        Timeout in integer seconds.
    """
    return _get_positive_int("DOCFORGE_LLM_TIMEOUT", DEFAULT_LLM_TIMEOUT)


def get_max_retries() -> int:
    """Get how many attempts a model call gets on internal errors."""
    return _get_positive_int("DOCFORGE_MAX_RETRIES", DEFAULT_MAX_RETRIES)


def get_min_code_length() -> int:
    """Get the shortest fuzzy-extracted code accepted without fallback."""
    return _get_positive_int("DOCFORGE_MIN_CODE_LENGTH", DEFAULT_MIN_CODE_LENGTH)


def get_temperature() -> float:
    """Get the sampling temperature for analysis requests.

    Reads from DOCFORGE_TEMPERATURE environment variable.
    Values outside 0.0-2.0 or non-numeric values fall back to 0.2.

    Returns:
        Temperature as float.
    """
    raw = os.environ.get("DOCFORGE_TEMPERATURE", "")
    if raw and raw.strip():
        try:
            value = float(raw.strip())
            if 0.0 <= value <= 2.0:
                return value
            logger.debug(
                "Invalid DOCFORGE_TEMPERATURE '%s' (out of range), falling back to %s",
                raw,
                DEFAULT_TEMPERATURE,
            )
        except ValueError:
            logger.debug(
                "Invalid DOCFORGE_TEMPERATURE '%s' (not a number), falling back to %s",
                raw,
                DEFAULT_TEMPERATURE,
            )
    return DEFAULT_TEMPERATURE


def get_audit_log_path() -> str:
    """Get the audit log path with ~ expanded."""
    raw = os.environ.get("DOCFORGE_AUDIT_LOG", "")
    path = raw.strip() if raw and raw.strip() else DEFAULT_AUDIT_LOG
    return os.path.expanduser(path)


def get_provider_from_model(model: str) -> str:
    """Extract the provider name from a model string.

    Model strings follow LiteLLM format: provider/model-name
    For example: "gemini/gemini-2.5-flash" -> "gemini"

    Returns:
        The provider name (first segment before '/').
        Returns the full string if no '/' is present (invalid format).
    """
    if "/" not in model:
        return model
    return model.split("/")[0]


def is_valid_model_string(model: str) -> bool:
    """Check if a model string follows the provider/model-name format."""
    if "/" not in model:
        return False
    parts = model.split("/", 1)
    return len(parts[0]) > 0 and len(parts[1]) > 0


def validate_credentials(model: str | None = None) -> tuple[bool, str]:
    """Validate that the configured model is usable.

    Args:
        model: Model to check. Defaults to get_model().

    Returns:
        Tuple of (is_valid, message).
        If valid: (True, "using model message")
        If invalid: (False, "error message with instructions")
    """
    if model is None:
        model = get_model()

    if not is_valid_model_string(model):
        return (False, f"Invalid model format '{model}': expected 'provider/model-name'.")

    provider = get_provider_from_model(model)
    if get_api_key(provider):
        return (True, f"Using model: {model}")

    lookup = PROVIDER_ENV_VARS.get(provider.lower(), f"{provider.upper()}_API_KEY")
    names = (lookup,) if isinstance(lookup, str) else lookup
    exports = "\n  ".join(f"export {name}=\"your-key-here\"" for name in names)
    return (False, f"""No API key configured for provider '{provider}'.

docforge requires an API key to analyze documents.

Set one of these environment variables:
  {exports}

Or choose another model with DOCFORGE_MODEL=provider/model-name.""")


def _get_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if raw and raw.strip():
        try:
            value = int(raw.strip())
            if value > 0:
                return value
            logger.debug(
                "Invalid %s '%s' (must be positive), falling back to %d",
                name,
                raw,
                default,
            )
        except ValueError:
            logger.debug(
                "Invalid %s '%s' (not an integer), falling back to %d",
                name,
                raw,
                default,
            )
    return default
