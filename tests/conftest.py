"""Shared fixtures for quicktest tests."""

import io

import pytest

from quicktest import backtrace, errors
from quicktest.options import RunOptions
from quicktest.registry import Registry


@pytest.fixture
def registry() -> Registry:
    """A registry private to one test."""
    return Registry()


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def options() -> RunOptions:
    return RunOptions(seed=42, orig_args=["--seed", "42"])


@pytest.fixture(autouse=True)
def restore_process_settings(monkeypatch):
    """Keep backtrace and marker settings from leaking between tests."""
    monkeypatch.setattr(backtrace, "backtrace_filter", backtrace.BacktraceFilter())
    monkeypatch.setattr(errors, "_marker_re", errors._marker_re)
    monkeypatch.delenv("QUICKTEST_NO_SKIP_MSG", raising=False)
    monkeypatch.delenv("QUICKTEST_DEBUG", raising=False)
