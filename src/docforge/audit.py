"""Audit logging module.

Records the outcome of every parsed model response to a JSON-lines
trail, so recovery rates per strategy can be reviewed later.
Default location: ~/.docforge/audit.log (override with DOCFORGE_AUDIT_LOG).
"""

import json
import logging
import os
from datetime import datetime, timezone

from docforge.config import get_audit_log_path
from docforge.models import FieldNotFound, RepairFailure
from docforge.pipeline import ParseOutcome

logger = logging.getLogger(__name__)

_audit_fd = None
_audit_available = False


def init_audit_log(path: str | None = None) -> bool:
    """Initialize the audit log file.

    Args:
        path: Log file path. Defaults to get_audit_log_path().

    Returns:
        True if audit logging is available, False otherwise.
    """
    global _audit_fd, _audit_available

    if path is None:
        path = get_audit_log_path()

    directory = os.path.dirname(path)
    if directory:
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError:
            logger.debug("Could not create audit dir %s", directory)
            _audit_available = False
            return False

    try:
        _audit_fd = open(path, "a")
        _audit_available = True
        return True
    except OSError as e:
        logger.warning("Could not open audit log %s: %s", path, e)
        _audit_available = False
        return False


def close_audit_log() -> None:
    """Close the audit log if it is open."""
    global _audit_fd, _audit_available
    if _audit_fd is not None:
        _audit_fd.close()
    _audit_fd = None
    _audit_available = False


def log_outcome(outcome: ParseOutcome, source: str = "", model: str = "") -> None:
    """Log a pipeline outcome to the audit trail.

    Args:
        outcome: The terminal state of a pipeline run.
        source: Where the response came from (file name, "model", ...).
        model: Which model produced the response, if known.
    """
    if not _audit_available or _audit_fd is None:
        return

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "stage": outcome.stage.value,
        "strategy": outcome.strategy,
        "failures": [_describe_failure(f) for f in outcome.failures],
        "input_length": outcome.input_length,
        "diagnostic": outcome.error.diagnostic if outcome.error is not None else "",
        "source": source,
        "model": model,
    }

    try:
        _audit_fd.write(json.dumps(entry) + "\n")
        _audit_fd.flush()
    except OSError:
        logger.debug("Failed to write audit log entry")


def _describe_failure(failure: RepairFailure | FieldNotFound) -> str:
    if isinstance(failure, FieldNotFound):
        return f"field_not_found:{failure.key}"
    return f"repair_failure:{failure.reason}"
