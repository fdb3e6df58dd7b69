"""Tests for audit logging."""

import json

from docforge import audit
from docforge.pipeline import run_pipeline
from tests.utils import sample_response_text


class TestInitAuditLog:
    """Tests for init_audit_log function."""

    def test_creates_directory(self, tmp_path):
        """Missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "audit.log"
        assert audit.init_audit_log(str(path)) is True
        assert path.parent.is_dir()

    def test_uses_configured_path(self, isolated_audit_log):
        """Without an argument the configured path is used."""
        assert audit.init_audit_log() is True
        assert isolated_audit_log.exists()

    def test_unwritable_location(self, tmp_path):
        """A path under a regular file cannot be opened."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert audit.init_audit_log(str(blocker / "audit.log")) is False


class TestLogOutcome:
    """Tests for log_outcome function."""

    def _entries(self, path):
        return [json.loads(line) for line in path.read_text().splitlines()]

    def test_validated_entry(self, isolated_audit_log):
        """A validated outcome is recorded with its strategy and source."""
        audit.init_audit_log()
        raw = sample_response_text()

        audit.log_outcome(run_pipeline(raw), source="response.json", model="gemini/x")

        (entry,) = self._entries(isolated_audit_log)
        assert entry["stage"] == "validated"
        assert entry["strategy"] == "direct"
        assert entry["failures"] == []
        assert entry["input_length"] == len(raw)
        assert entry["diagnostic"] == ""
        assert entry["source"] == "response.json"
        assert entry["model"] == "gemini/x"
        assert "timestamp" in entry

    def test_rejected_entry(self, isolated_audit_log):
        """A rejected outcome is recorded with its failures and diagnostic."""
        audit.init_audit_log()

        audit.log_outcome(run_pipeline("nothing useful"))

        (entry,) = self._entries(isolated_audit_log)
        assert entry["stage"] == "rejected"
        assert entry["strategy"] is None
        assert "repair_failure:no JSON object found" in entry["failures"]
        assert "field_not_found:pdfMakeCode" in entry["failures"]
        assert entry["diagnostic"].startswith("Failed to parse AI response")

    def test_appends(self, isolated_audit_log):
        """Each outcome appends one line."""
        audit.init_audit_log()
        audit.log_outcome(run_pipeline(""))
        audit.log_outcome(run_pipeline(""))
        assert len(self._entries(isolated_audit_log)) == 2

    def test_noop_when_not_initialized(self, isolated_audit_log):
        """Nothing is written before the log is opened."""
        audit.log_outcome(run_pipeline(""))
        assert not isolated_audit_log.exists()

    def test_noop_after_close(self, isolated_audit_log):
        """Nothing is written after the log is closed."""
        audit.init_audit_log()
        audit.close_audit_log()
        audit.log_outcome(run_pipeline(""))
        assert isolated_audit_log.read_text() == ""
