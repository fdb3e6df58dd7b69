"""LLM client module.

Sends a target document and its reference templates to the analysis
model and hands the raw reply to the repair pipeline. Models can be
configured via environment variables:
- DOCFORGE_MODEL: Model used for document analysis
- DOCFORGE_EXPLAIN_MODEL: Model used for code explanations

Requests that fail with an internal (5xx) provider error are retried
with exponential backoff; every other failure is reported immediately.
"""

import logging
import os
import time
from collections.abc import Sequence

import litellm
from litellm import completion

# Suppress litellm's verbose "Provider List" URL printing
litellm.suppress_debug_info = True

from docforge.config import PROVIDER_ENV_VARS as _PROVIDER_ENV_VARS

# litellm reads os.environ directly, so stray whitespace (\r from CRLF
# .env files) must be removed before the first request.
for _lookup in _PROVIDER_ENV_VARS.values():
    _names = (_lookup,) if isinstance(_lookup, str) else _lookup
    for _var in _names:
        _val = os.environ.get(_var)
        if _val and _val != _val.strip():
            os.environ[_var] = _val.strip()

# Bridge GOOGLE_API_KEY → GEMINI_API_KEY for litellm's gemini/ provider
if not os.environ.get("GEMINI_API_KEY") and os.environ.get("GOOGLE_API_KEY"):
    os.environ["GEMINI_API_KEY"] = os.environ["GOOGLE_API_KEY"]

from docforge import audit
from docforge.config import (
    get_explain_model,
    get_llm_timeout,
    get_max_retries,
    get_min_code_length,
    get_model,
    get_provider_from_model,
    get_temperature,
)
from docforge.constants import (
    ANALYZE_INSTRUCTION,
    BAD_REQUEST_MESSAGE,
    EXPLAIN_PROMPT,
    EXPLAIN_TEMPERATURE,
    GEMINI_SAFETY_SETTINGS,
    MAX_EXPLAIN_CHARS,
    MAX_REFERENCE_CHARS,
    MAX_REFERENCE_FILES,
    MAX_TARGET_CHARS,
    RETRY_BASE_DELAY,
    SYSTEM_PROMPT,
    TOKEN_LIMIT_MESSAGE,
)
from docforge.errors import EmptyInputError, ModelRequestError
from docforge.models import AnalysisResult
from docforge.pipeline import run_pipeline
from docforge.utils import friendly_error, truncate_text

logger = logging.getLogger(__name__)


def build_messages(
    target: str,
    references: Sequence[tuple[str, str]] = (),
    instructions: str | None = None,
    target_name: str | None = None,
) -> list[dict]:
    """Build the chat messages for an analysis request.

    Args:
        target: Text of the document to analyze.
        references: (name, content) pairs of reference templates. Only
            the first MAX_REFERENCE_FILES are sent.
        instructions: Optional free-form user instructions.
        target_name: File name of the target, if it came from a file.

    Returns:
        List of message dicts with system and user roles.
    """
    parts = []

    refs = list(references)[:MAX_REFERENCE_FILES]
    if len(references) > MAX_REFERENCE_FILES:
        logger.warning(
            "Only the first %d of %d reference files are sent",
            MAX_REFERENCE_FILES,
            len(references),
        )
    if refs:
        parts.append("REFERENCE LIBRARY FILES (Use these as templates if layout matches):")
        for name, content in refs:
            parts.append(
                f"[Reference File: {name}]\n{truncate_text(content, MAX_REFERENCE_CHARS)}"
            )

    if target_name:
        parts.append(f"TARGET FILE TO ANALYZE: [{target_name}]")
    else:
        parts.append("TARGET DATA (JSON Source):")
    parts.append(truncate_text(target, MAX_TARGET_CHARS))

    request = ANALYZE_INSTRUCTION
    if instructions and instructions.strip():
        request += f"\n\nUSER EXTRA INSTRUCTIONS:\n{instructions.strip()}"
    parts.append(request)

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n\n".join(parts)},
    ]


def query_model(
    messages: list[dict],
    model: str | None = None,
    temperature: float | None = None,
    json_mode: bool = True,
) -> str:
    """Send messages to a model and return the reply text.

    Internal provider errors are retried up to get_max_retries() attempts,
    sleeping RETRY_BASE_DELAY * 2**n seconds before retry n.

    Raises:
        EmptyInputError: The model replied with no text.
        Exception: Any litellm error that is not retried, or the last
            internal error once retries are exhausted.
    """
    if model is None:
        model = get_model()
    if temperature is None:
        temperature = get_temperature()

    kwargs = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "timeout": get_llm_timeout(),
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    if get_provider_from_model(model) == "gemini":
        kwargs["safety_settings"] = GEMINI_SAFETY_SETTINGS

    max_retries = get_max_retries()
    attempt = 0
    while True:
        try:
            response = completion(**kwargs)
            break
        except Exception as e:
            attempt += 1
            if not _is_internal_error(e) or attempt >= max_retries:
                raise
            delay = RETRY_BASE_DELAY * 2**attempt
            logger.warning(
                "Internal error from %s, retrying attempt %d/%d in %.0fs",
                model,
                attempt,
                max_retries,
                delay,
            )
            time.sleep(delay)

    return _response_text(response)


def analyze_document(
    target: str,
    references: Sequence[tuple[str, str]] = (),
    instructions: str | None = None,
    target_name: str | None = None,
    model: str | None = None,
) -> AnalysisResult:
    """Analyze a document and return the recovered generation result.

    Args:
        target: Text of the document to analyze.
        references: (name, content) pairs of reference templates.
        instructions: Optional free-form user instructions.
        target_name: File name of the target, if it came from a file.
        model: Model override. Defaults to get_model().

    Returns:
        The validated AnalysisResult.

    Raises:
        ModelRequestError: The provider rejected or failed the request.
        ResponseParseError: The reply was empty or unrecoverable.
    """
    if model is None:
        model = get_model()

    logger.info("Initializing model (%s)...", model)
    messages = build_messages(target, references, instructions, target_name)

    logger.info("Sending data to model...")
    try:
        content = query_model(messages, model)
    except EmptyInputError:
        raise
    except Exception as e:
        raise _request_error(model, e) from e

    logger.info("Response received, parsing (%d chars)", len(content))
    outcome = run_pipeline(content, min_code_length=get_min_code_length())
    audit.log_outcome(outcome, source=target_name or "", model=model)
    if outcome.error is not None:
        raise outcome.error

    logger.info("Analysis successful (strategy: %s)", outcome.strategy)
    return outcome.result


def explain_code(code: str, kind: str, model: str | None = None) -> str:
    """Ask the explanation model to describe generated code in Markdown.

    Never raises: failures are returned as a readable message.
    """
    if model is None:
        model = get_explain_model()

    prompt = EXPLAIN_PROMPT.format(kind=kind, code=code[:MAX_EXPLAIN_CHARS])
    try:
        content = query_model(
            [{"role": "user", "content": prompt}],
            model,
            temperature=EXPLAIN_TEMPERATURE,
            json_mode=False,
        )
    except EmptyInputError:
        return "Could not generate explanation."
    except Exception as e:
        friendly = friendly_error(model, e)
        logger.warning("Explanation failed for %s: %s", model, friendly)
        return f"Failed to generate explanation: {friendly}"
    return content


def _response_text(response) -> str:
    choices = getattr(response, "choices", None) or []
    choice = choices[0] if choices else None
    content = choice.message.content if choice is not None else None
    if content and content.strip():
        return content

    finish_reason = getattr(choice, "finish_reason", None)
    if finish_reason and finish_reason != "stop":
        raise EmptyInputError(f"AI generation stopped. Reason: {finish_reason}.")
    raise EmptyInputError()


def _is_internal_error(exc: Exception) -> bool:
    if getattr(exc, "status_code", None) == 500:
        return True
    msg = str(exc)
    return "500" in msg or "INTERNAL" in msg


def _request_error(model: str, exc: Exception) -> ModelRequestError:
    msg = str(exc)
    if getattr(exc, "status_code", None) == 400 or "400" in msg or "INVALID_ARGUMENT" in msg:
        if "token count" in msg.lower():
            return ModelRequestError(TOKEN_LIMIT_MESSAGE)
        return ModelRequestError(f"{BAD_REQUEST_MESSAGE} {friendly_error(model, exc)}")
    return ModelRequestError(friendly_error(model, exc))
