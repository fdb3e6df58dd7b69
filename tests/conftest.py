"""Shared pytest fixtures for docforge tests.

Provides common fixtures that can be used across test modules.
For mock utilities (MockChoice, MockResponse, sample responses),
see tests/utils.py which can be imported directly.
"""

import pytest

from docforge import audit


@pytest.fixture(autouse=True)
def isolated_audit_log(tmp_path, monkeypatch):
    """Point the audit trail at a temp file and close it after each test."""
    path = tmp_path / "audit.log"
    monkeypatch.setenv("DOCFORGE_AUDIT_LOG", str(path))
    yield path
    audit.close_audit_log()
