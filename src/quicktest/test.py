"""Test units: the concrete runnable with assertions, hooks and guards."""

import logging
import platform
import re
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from quicktest.errors import Failure, Skip, UnexpectedError
from quicktest.result import Result
from quicktest.runnable import Runnable

logger = logging.getLogger(__name__)


def _message(msg: Optional[str], default: str) -> str:
    return f"{msg}.\n{default}" if msg else default


class Assertions:
    """Assertion helpers. Each call counts towards ``assertions``."""

    assertions: int

    def assert_(self, test: Any, msg: Optional[str] = None) -> bool:
        """Fails unless ``test`` is truthy."""
        self.assertions += 1
        if not test:
            raise Failure(msg or "Expected %r to be truthy." % (test,))
        return True

    def refute(self, test: Any, msg: Optional[str] = None) -> bool:
        """Fails if ``test`` is truthy."""
        self.assertions += 1
        if test:
            raise Failure(msg or "Expected %r to not be truthy." % (test,))
        return True

    def assert_equal(self, exp: Any, act: Any, msg: Optional[str] = None) -> bool:
        return self.assert_(exp == act, _message(msg, f"Expected: {exp!r}\n  Actual: {act!r}"))

    def refute_equal(self, exp: Any, act: Any, msg: Optional[str] = None) -> bool:
        return self.refute(exp == act, _message(msg, f"Expected {act!r} to not be equal to {exp!r}."))

    def assert_in(self, member: Any, container: Any, msg: Optional[str] = None) -> bool:
        return self.assert_(member in container, _message(msg, f"Expected {container!r} to include {member!r}."))

    def refute_in(self, member: Any, container: Any, msg: Optional[str] = None) -> bool:
        return self.refute(member in container, _message(msg, f"Expected {container!r} to not include {member!r}."))

    def assert_none(self, obj: Any, msg: Optional[str] = None) -> bool:
        return self.assert_(obj is None, _message(msg, f"Expected {obj!r} to be None."))

    def refute_none(self, obj: Any, msg: Optional[str] = None) -> bool:
        return self.refute(obj is None, _message(msg, "Expected None to not be None."))

    def assert_instance_of(self, cls: type, obj: Any, msg: Optional[str] = None) -> bool:
        return self.assert_(
            isinstance(obj, cls),
            _message(msg, f"Expected {obj!r} to be an instance of {cls.__name__}, not {type(obj).__name__}."),
        )

    def assert_match(self, pattern: str | re.Pattern, text: str, msg: Optional[str] = None) -> bool:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.assert_(regex.search(text), _message(msg, f"Expected {regex.pattern!r} to match {text!r}."))

    def assert_in_delta(self, exp: float, act: float, delta: float = 0.001, msg: Optional[str] = None) -> bool:
        n = abs(exp - act)
        return self.assert_(
            delta >= n,
            _message(msg, f"Expected |{exp!r} - {act!r}| ({n!r}) to be <= {delta!r}."),
        )

    def assert_raises(self, *expected: type[BaseException], msg: Optional[str] = None) -> "AssertRaises":
        """Context manager failing unless the block raises one of ``expected``.

        Defaults to any ``Exception`` other than a ``Failure``. A ``Skip``
        raised in the block is never swallowed.

        The raised exception is available as ``.exception`` afterwards.
        """
        return AssertRaises(self, expected or (Exception,), msg)

    def flunk(self, msg: Optional[str] = None) -> None:
        """Fails with ``msg``."""
        self.assertions += 1
        raise Failure(msg or "Epic Fail!")

    def pass_(self, msg: Optional[str] = None) -> bool:
        """Used for counting assertions."""
        return self.assert_(True, msg)

    def skip(self, msg: Optional[str] = None) -> None:
        """Skips the current run."""
        raise Skip(msg or "Skipped, no message given")


class AssertRaises:
    """Context manager returned by ``Assertions.assert_raises``."""

    def __init__(self, test: Assertions, expected: tuple[type[BaseException], ...], msg: Optional[str]):
        self.test = test
        self.expected = expected
        self.msg = msg
        self.exception: Optional[BaseException] = None

    def __enter__(self) -> "AssertRaises":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        names = ", ".join(e.__name__ for e in self.expected)
        self.test.assertions += 1

        if exc_type is None:
            raise Failure(_message(self.msg, f"[{names}] expected but nothing was raised."))

        if issubclass(exc_type, (Skip, KeyboardInterrupt)):
            return False

        # Failures only count when a Failure type was asked for explicitly.
        if issubclass(exc_type, Failure) and not any(issubclass(e, Failure) for e in self.expected):
            return False

        if issubclass(exc_type, self.expected):
            self.exception = exc
            return True

        raise Failure(
            _message(self.msg, f"[{names}] exception expected, not\nClass: <{exc_type.__name__}>\nMessage: <{exc}>")
        ) from exc


class Guard:
    """Platform checks for skipping tests that do not apply."""

    def cpython(self, implementation: Optional[str] = None) -> bool:
        return (implementation or platform.python_implementation()) == "CPython"

    def pypy(self, implementation: Optional[str] = None) -> bool:
        return (implementation or platform.python_implementation()) == "PyPy"

    def jython(self, implementation: Optional[str] = None) -> bool:
        return (implementation or platform.python_implementation()) == "Jython"

    def windows(self, plat: Optional[str] = None) -> bool:
        return re.match(r"win32|cygwin", plat or sys.platform) is not None


class Test(Assertions, Guard, Runnable, abstract=True):
    """Subclass this to write tests. Methods named ``test_*`` are run."""

    __test__ = False

    @classmethod
    def runnable_methods(cls) -> list[str]:
        return cls.methods_matching(r"^test_")

    def setup(self) -> None:
        """Runs before every test."""

    def teardown(self) -> None:
        """Runs after every test, even when it failed."""

    def __call__(self) -> Result:
        started = time.perf_counter()

        with self.capture_exceptions():
            self.setup()
            getattr(self, self.name)()

        with self.capture_exceptions():
            self.teardown()

        self.time = time.perf_counter() - started
        return Result.from_runnable(self)

    @contextmanager
    def capture_exceptions(self) -> Iterator[None]:
        """Record whatever the block raises as this test's failure.

        Only the first failure is kept.
        """
        try:
            yield
        except KeyboardInterrupt:
            raise
        except Failure as e:
            self.record_failure(e)
        except AssertionError as e:
            self.record_failure(Failure.from_assertion_error(e))
        except BaseException as e:
            self.record_failure(UnexpectedError(e))

    def record_failure(self, failure: Failure) -> None:
        if self.failures:
            logger.debug("%s#%s: ignoring later %s", type(self).__name__, self.name, failure.result_label)
            return
        self.failures.append(failure)
