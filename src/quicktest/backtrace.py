"""Backtrace formatting and filtering.

Frames are plain strings of the form ``"<file>:<line>:in <function>"``,
ordered innermost first.
"""

import os
import re
import traceback
from types import TracebackType
from typing import Optional, Sequence

NO_BACKTRACE = "No backtrace"

# Frames coming from this package's own source tree.
DEFAULT_INTERNAL_PATTERN = "^" + re.escape(
    os.path.dirname(os.path.abspath(__file__)) + os.sep
)


def format_traceback(tb: Optional[TracebackType]) -> Optional[list[str]]:
    """Convert a traceback into frame strings, innermost first."""
    if tb is None:
        return None

    frames = [
        f"{frame.filename}:{frame.lineno}:in {frame.name}"
        for frame in traceback.extract_tb(tb)
    ]
    frames.reverse()
    return frames


class BacktraceFilter:
    """Trims a backtrace down to the frames outside quicktest itself."""

    def __init__(
        self,
        internal_pattern: str = DEFAULT_INTERNAL_PATTERN,
        debug: bool = False,
    ):
        self.internal = re.compile(internal_pattern)
        self.debug = debug

    def is_internal(self, frame: str) -> bool:
        return self.internal.search(frame) is not None

    def filter(self, frames: Optional[Sequence[str]]) -> list[str]:
        """Filter ``frames``; never returns an empty list for non-empty input."""
        if frames is None:
            return [NO_BACKTRACE]

        if self.debug:
            return list(frames)

        new_frames = []
        for frame in frames:
            if self.is_internal(frame):
                break
            new_frames.append(frame)

        if not new_frames:
            new_frames = [f for f in frames if not self.is_internal(f)]
        if not new_frames:
            new_frames = list(frames)

        return new_frames


def debug_from_env() -> bool:
    return os.environ.get("QUICKTEST_DEBUG", "").lower() in ("1", "true", "yes")


backtrace_filter = BacktraceFilter(debug=debug_from_env())


def configure_backtrace(
    internal_pattern: Optional[str] = None, debug: Optional[bool] = None
) -> BacktraceFilter:
    """Replace the process-wide filter and return the new one."""
    global backtrace_filter

    backtrace_filter = BacktraceFilter(
        internal_pattern=internal_pattern or backtrace_filter.internal.pattern,
        debug=backtrace_filter.debug if debug is None else debug,
    )
    return backtrace_filter


def filter_backtrace(frames: Optional[Sequence[str]]) -> list[str]:
    """Filter ``frames`` with the process-wide filter."""
    return backtrace_filter.filter(frames)
