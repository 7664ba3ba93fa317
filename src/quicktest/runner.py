"""Test run orchestration."""

import importlib
import logging
from typing import Iterable, Optional, TextIO

from quicktest.options import RunOptions
from quicktest.registry import Registry, default_registry
from quicktest.reporters import CompositeReporter, ProgressReporter, SummaryReporter
from quicktest.runnable import CancellationToken

logger = logging.getLogger(__name__)


def load_modules(names: Iterable[str]) -> list[str]:
    """Import modules so the test classes they define register themselves."""
    loaded = []
    for name in names:
        logger.info("Loading %s", name)
        importlib.import_module(name)
        loaded.append(name)
    return loaded


def build_reporter(
    io: Optional[TextIO] = None,
    options: Optional[RunOptions] = None,
    registry: Registry = default_registry,
) -> CompositeReporter:
    """Build the default reporter chain and apply the registry's configurators."""
    options = options or RunOptions()

    reporter = CompositeReporter()
    reporter.add(ProgressReporter(io, options))
    reporter.add(SummaryReporter(io, options))

    registry.configure(reporter, options)
    return reporter


class TestRunner:
    """Runs every registered runnable under one reporter lifecycle."""

    __test__ = False

    def __init__(
        self,
        reporter: CompositeReporter,
        options: Optional[RunOptions] = None,
        registry: Registry = default_registry,
        cancel: Optional[CancellationToken] = None,
    ):
        """Initialize the test runner.

        Args:
            reporter: Top-level reporter receiving every result
            options: Options for this run
            registry: Registry holding the runnables to execute
            cancel: Token checked between methods to stop the run early
        """
        self.reporter = reporter
        self.options = options or RunOptions()
        self.registry = registry
        self.cancel = cancel or CancellationToken()

    def run(self) -> bool:
        """Execute all runnables and return whether the run passed."""
        runnables = self.registry.runnables
        logger.info("Running %d runnable(s)", len(runnables))

        self.reporter.start()

        for runnable in runnables:
            runnable.run(self.reporter, self.options, self.cancel)
            if self.cancel.cancelled:
                logger.info("Run cancelled after %s", runnable.__name__)
                break

        self.reporter.report()

        passed = self.reporter.passed()
        logger.info("Run %s", "passed" if passed else "failed")
        return passed
