"""Runnable test units and the loop that executes their methods."""

import inspect
import logging
import re
import sys
import threading
from typing import Callable, ClassVar, Optional, TextIO

from quicktest.errors import Failure, Skip, UnexpectedError
from quicktest.options import RunOptions
from quicktest.registry import Registry, default_registry
from quicktest.reporters import AbstractReporter
from quicktest.result import Result

logger = logging.getLogger(__name__)


class CancellationToken:
    """Signals a running loop to stop between two methods."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def compile_filter(pattern: Optional[str]) -> Callable[[str], bool]:
    """Build a predicate from a method filter.

    ``None`` matches everything, ``/re/`` is searched as a regular
    expression, anything else must be equal to the candidate.
    """
    if pattern is None:
        return lambda candidate: True

    match = re.fullmatch(r"/(.*)/", pattern, re.DOTALL)
    if match:
        regex = re.compile(match.group(1))
        return lambda candidate: regex.search(candidate) is not None

    return lambda candidate: candidate == pattern


class Runnable:
    """Anything runnable: a group of methods each executed in its own instance.

    Subclasses are registered in definition order. Pass ``registry=`` in the
    class statement to register into a registry other than the default one,
    and ``abstract=True`` to keep a base class out of the registry.
    """

    registry: ClassVar[Registry] = default_registry

    def __init_subclass__(cls, registry: Optional[Registry] = None, abstract: bool = False, **kwargs):
        super().__init_subclass__(**kwargs)
        if registry is not None:
            cls.registry = registry
        if not abstract:
            cls.registry.register(cls)

    def __init__(self, name: str):
        self.name = name
        self.failures: list[Failure] = []
        self.assertions = 0
        self.time = 0.0

    @classmethod
    def runnable_methods(cls) -> list[str]:
        """Names of the methods to run, in a stable order."""
        raise NotImplementedError("subclass responsibility")

    @classmethod
    def methods_matching(cls, pattern: str) -> list[str]:
        """Public methods whose names match ``pattern``, sorted by name."""
        regex = re.compile(pattern)
        return sorted(
            name
            for name in dir(cls)
            if not name.startswith("_")
            and regex.search(name)
            and callable(getattr(cls, name, None))
        )

    @classmethod
    def run(
        cls,
        reporter: AbstractReporter,
        options: Optional[RunOptions] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> None:
        """Run every selected method, each in a fresh instance.

        Results are recorded into ``reporter``. Starting and finishing the
        reporter is left to the caller.
        """
        options = options or RunOptions()
        matches = compile_filter(options.filter)

        selected = [
            method_name
            for method_name in cls.runnable_methods()
            if matches(method_name) or matches(f"{cls.__name__}#{method_name}")
        ]
        logger.debug("%s: running %d method(s)", cls.__name__, len(selected))

        for method_name in selected:
            if cancel is not None and cancel.cancelled:
                cls.show_current_results(reporter)
                return
            cls.run_one_method(cls, method_name, reporter)

    @staticmethod
    def show_current_results(reporter: AbstractReporter, io: Optional[TextIO] = None) -> None:
        io = io if io is not None else sys.stderr
        logger.warning("Run interrupted, no further methods will be started")

        # Nothing to show while every result so far passed.
        if reporter.passed():
            return

        io.write("Current results:\n\n")
        io.write(reporter.current_results())
        io.write("\n")
        io.flush()

    @staticmethod
    def run_one_method(klass: type["Runnable"], method_name: str, reporter: AbstractReporter) -> None:
        reporter.record(execute(klass, method_name))

    def __call__(self) -> Result:
        """Run the single method named by ``self.name`` and return its Result."""
        raise NotImplementedError("subclass responsibility")

    @property
    def failure(self) -> Optional[Failure]:
        return self.failures[0] if self.failures else None

    @property
    def passed(self) -> bool:
        """Did this run pass?

        Skipped runs are not considered passing, but they don't cause the
        process to exit non-zero.
        """
        return not self.failures

    @property
    def skipped(self) -> bool:
        return isinstance(self.failure, Skip)

    @property
    def result_code(self) -> str:
        return self.failure.result_code if self.failure else "."

    def source_location(self) -> Optional[str]:
        method = getattr(type(self), self.name, None)
        if method is None:
            return None
        try:
            filename = inspect.getsourcefile(method)
            _, lineno = inspect.getsourcelines(method)
        except (OSError, TypeError):
            return None
        return f"{filename}:{lineno}"


def execute(klass: type[Runnable], method_name: str) -> Result:
    """Run one method and always hand back a Result."""
    runnable = None
    try:
        runnable = klass(method_name)
        result = runnable()
        if not isinstance(result, Result):
            raise TypeError(f"{klass.__name__}() must return a Result")
        return result
    except KeyboardInterrupt:
        raise
    except BaseException as e:
        logger.debug("%s#%s raised outside its body", klass.__name__, method_name, exc_info=True)
        failures: list[Failure] = [UnexpectedError(e)]
        return Result(
            klass=klass.__name__,
            name=method_name,
            assertions=runnable.assertions if runnable is not None else 0,
            failures=failures,
        )
