"""
Shared pytest fixtures.
"""

import pytest

from subscriptproxy.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Re-read settings for every test so env changes take effect."""
    for name in (
        "FALLBACK",
        "EVALUATE_FUNCTIONS",
        "COPY_PARENT_PROTOTYPE",
        "EXCLUDED_KEYS",
        "TRACE_ACCESS",
    ):
        monkeypatch.delenv(f"SUBSCRIPTPROXY_{name}", raising=False)
    reset_settings()
    yield
    reset_settings()
