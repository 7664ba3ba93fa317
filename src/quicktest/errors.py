"""Failure types recorded for tests that do not pass."""

import re
from typing import Iterable, Optional

from quicktest.backtrace import filter_backtrace, format_traceback

DEFAULT_MARKERS = ("assert", "refute", "flunk", "pass", "fail", "raise", "must", "wont")

_marker_re = re.compile(r"in (?:%s)" % "|".join(DEFAULT_MARKERS))


def configure_markers(verbs: Iterable[str]) -> None:
    """Set the function-name prefixes that identify assertion helper frames."""
    global _marker_re

    verbs = [re.escape(v) for v in verbs]
    if not verbs:
        raise ValueError("At least one assertion marker is required")
    _marker_re = re.compile(r"in (?:%s)" % "|".join(verbs))


class Failure(Exception):
    """An assertion raised during a run."""

    result_label = "Failure"

    @property
    def result_code(self) -> str:
        return self.result_label[0]

    @property
    def error(self) -> BaseException:
        return self

    @property
    def message(self) -> str:
        return str(self)

    @property
    def backtrace(self) -> Optional[list[str]]:
        return format_traceback(self.__traceback__)

    @property
    def filtered_backtrace(self) -> list[str]:
        return filter_backtrace(self.backtrace)

    def location(self) -> str:
        """Where was the test before the assertion was raised?

        Walks the filtered backtrace from the outermost frame inward and
        returns ``file:line`` of the frame just before the first assertion
        helper frame.
        """
        last_before_assertion = ""
        for frame in reversed(self.filtered_backtrace):
            if _marker_re.search(frame):
                break
            last_before_assertion = frame
        return re.sub(r":in .*$", "", last_before_assertion)

    @classmethod
    def from_assertion_error(cls, exc: AssertionError) -> "Failure":
        """Convert a bare ``assert`` statement failure."""
        message = str(exc) or "assert statement failed"
        return cls(message).with_traceback(exc.__traceback__)


class Skip(Failure):
    """Raised when a test asks to be skipped."""

    result_label = "Skipped"


class UnexpectedError(Failure):
    """Wraps an exception that was not raised by an assertion."""

    result_label = "Error"

    def __init__(self, exception: BaseException):
        super().__init__(str(exception))
        self.exception = exception

    @property
    def error(self) -> BaseException:
        return self.exception

    @property
    def backtrace(self) -> Optional[list[str]]:
        return format_traceback(self.exception.__traceback__)

    @property
    def message(self) -> str:
        bt = "\n    ".join(self.filtered_backtrace)
        return f"{type(self.exception).__name__}: {self.exception}\n    {bt}"
