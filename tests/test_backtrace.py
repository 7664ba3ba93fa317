"""Tests for backtrace filtering."""

import sys

from quicktest import backtrace
from quicktest.backtrace import (
    NO_BACKTRACE,
    BacktraceFilter,
    configure_backtrace,
    filter_backtrace,
    format_traceback,
)

INTERNAL = r"lib/quicktest"

USER_1 = "test/test_calc.py:10:in test_add"
USER_2 = "test/helper.py:3:in check"
INTERNAL_1 = "lib/quicktest/test.py:20:in assert_"
INTERNAL_2 = "lib/quicktest/test.py:80:in __call__"


class TestBacktraceFilter:
    """Tests for BacktraceFilter."""

    def test_absent_backtrace(self):
        """Test that a missing trace yields the sentinel frame."""
        bt_filter = BacktraceFilter(INTERNAL)
        assert bt_filter.filter(None) == [NO_BACKTRACE]

    def test_leading_user_frames_kept(self):
        """Test that the leading run of user frames is returned."""
        bt_filter = BacktraceFilter(INTERNAL)
        frames = [USER_1, USER_2, INTERNAL_2, USER_1]

        assert bt_filter.filter(frames) == [USER_1, USER_2]

    def test_falls_back_to_all_user_frames(self):
        """Test selecting every non-internal frame when the trace starts internal."""
        bt_filter = BacktraceFilter(INTERNAL)
        frames = [INTERNAL_1, USER_1, INTERNAL_2, USER_2]

        assert bt_filter.filter(frames) == [USER_1, USER_2]

    def test_all_internal_returns_original(self):
        """Test that an all-internal trace comes back unfiltered."""
        bt_filter = BacktraceFilter(INTERNAL)
        frames = [INTERNAL_1, INTERNAL_2]

        result = bt_filter.filter(frames)

        assert result == frames
        assert result is not frames

    def test_debug_returns_copy(self):
        """Test that debug mode skips filtering."""
        bt_filter = BacktraceFilter(INTERNAL, debug=True)
        frames = [INTERNAL_1, USER_1]

        assert bt_filter.filter(frames) == frames

    def test_empty_trace(self):
        """Test that an empty trace stays empty."""
        assert BacktraceFilter(INTERNAL).filter([]) == []


class TestFormatTraceback:
    """Tests for format_traceback."""

    def test_none(self):
        assert format_traceback(None) is None

    def test_innermost_first(self):
        """Test that frames are ordered innermost first."""

        def inner():
            raise ValueError("boom")

        def outer():
            inner()

        try:
            outer()
        except ValueError:
            tb = sys.exc_info()[2]

        frames = format_traceback(tb)

        assert frames[0].endswith(":in inner")
        assert frames[1].endswith(":in outer")
        assert frames[-1].endswith(":in test_innermost_first")
        assert "test_backtrace.py:" in frames[0]


class TestProcessFilter:
    """Tests for the process-wide filter."""

    def test_configure_replaces_filter(self):
        """Test that configure_backtrace installs a new filter."""
        new_filter = configure_backtrace(internal_pattern=INTERNAL, debug=False)

        assert backtrace.backtrace_filter is new_filter
        assert filter_backtrace([INTERNAL_1, USER_1]) == [USER_1]

    def test_configure_keeps_unspecified_settings(self):
        """Test that omitted settings keep their current values."""
        configure_backtrace(internal_pattern=INTERNAL)
        configure_backtrace(debug=True)

        assert backtrace.backtrace_filter.internal.pattern == INTERNAL
        assert filter_backtrace([INTERNAL_1, USER_1]) == [INTERNAL_1, USER_1]

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv("QUICKTEST_DEBUG", "1")
        assert backtrace.debug_from_env() is True

        monkeypatch.setenv("QUICKTEST_DEBUG", "no")
        assert backtrace.debug_from_env() is False
