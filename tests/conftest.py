"""Shared fixtures."""

import time

import pytest


@pytest.fixture
def utc_plus_3(monkeypatch: pytest.MonkeyPatch):
    """Run the test with the process local time fixed at UTC+3."""
    if not hasattr(time, "tzset"):
        pytest.skip("local timezone cannot be changed on this platform")
    monkeypatch.setenv("TZ", "<+03>-3")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
