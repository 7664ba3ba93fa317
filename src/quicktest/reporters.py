"""Reporters consuming the stream of results produced by a run.

Every reporter follows the same lifecycle: ``start()`` once, ``record()``
for each result, ``report()`` once at the end, and ``passed()`` to decide
the exit status.
"""

import os
import sys
import time
from typing import Optional, TextIO

from quicktest.options import RunOptions
from quicktest.result import Result

SKIP_HINT = "\n\nYou have skipped tests. Run with --verbose for details."


class AbstractReporter:
    """Defines the reporter API. Subclass this and override what you need."""

    def start(self) -> None:
        """Starts reporting on the run."""

    def record(self, result: Result) -> None:
        """Record a single result."""

    def report(self) -> None:
        """Outputs the summary of the run."""

    def passed(self) -> bool:
        """Did this run pass?"""
        return True

    def current_results(self) -> str:
        """Results gathered so far, shown when a run is interrupted."""
        return ""


class Reporter(AbstractReporter):
    """A reporter that writes to a text sink."""

    def __init__(self, io: Optional[TextIO] = None, options: Optional[RunOptions] = None):
        self.io = io if io is not None else sys.stdout
        self.options = options or RunOptions()

    def puts(self, text: str = "") -> None:
        """Write ``text`` followed by a newline unless it already ends with one."""
        self.io.write(text if text.endswith("\n") else text + "\n")


class ProgressReporter(Reporter):
    """Prints a result code per test as it finishes."""

    def record(self, result: Result) -> None:
        if self.options.verbose:
            self.io.write("%s#%s = %.2f s = " % (result.klass, result.name, result.time))
        self.io.write(result.result_code)
        if self.options.verbose:
            self.io.write("\n")
        self.io.flush()


class StatisticsReporter(Reporter):
    """Gathers statistics about a run without doing any output.

    This is the place to start for an entirely different kind of output.
    """

    def __init__(self, io: Optional[TextIO] = None, options: Optional[RunOptions] = None):
        super().__init__(io, options)

        self.assertions = 0
        self.count = 0
        self.results: list[Result] = []
        self.start_time: Optional[float] = None
        self.total_time: Optional[float] = None
        self.failures: Optional[int] = None
        self.errors: Optional[int] = None
        self.skips: Optional[int] = None

    def passed(self) -> bool:
        return all(r.skipped for r in self.results)

    def start(self) -> None:
        self.start_time = time.time()

    def record(self, result: Result) -> None:
        self.count += 1
        self.assertions += result.assertions

        if not result.passed or result.skipped:
            self.results.append(result)

    def report(self) -> None:
        aggregate: dict[str, int] = {}
        for result in self.results:
            aggregate[result.kind] = aggregate.get(result.kind, 0) + 1

        start_time = self.start_time if self.start_time is not None else time.time()
        self.total_time = time.time() - start_time
        self.failures = aggregate.get("failure", 0)
        self.errors = aggregate.get("error", 0)
        self.skips = aggregate.get("skip", 0)


class SummaryReporter(StatisticsReporter):
    """Prints the header, failure details and summary of the run."""

    def start(self) -> None:
        super().start()

        self.puts(f"Run options: {self.options.args}")
        self.puts()
        self.puts("# Running:")
        self.puts()
        self.io.flush()

    def report(self) -> None:
        super().report()

        if not self.options.verbose:
            self.puts()  # finish the dots
        self.puts()
        self.puts(self.statistics())
        self.puts(self.aggregated_results())
        self.puts(self.summary())
        self.io.flush()

    def statistics(self) -> str:
        total_time = self.total_time or 0.0
        if total_time > 0:
            runs_per_second = self.count / total_time
            assertions_per_second = self.assertions / total_time
        else:
            runs_per_second = assertions_per_second = 0.0

        return "Finished in %.6fs, %.4f runs/s, %.4f assertions/s." % (
            total_time,
            runs_per_second,
            assertions_per_second,
        )

    def aggregated_results(self) -> str:
        results = self.results
        if not self.options.verbose:
            results = [r for r in results if not r.skipped]

        return "\n".join("\n%3d) %s" % (i, r) for i, r in enumerate(results, 1)) + "\n"

    def current_results(self) -> str:
        return self.aggregated_results()

    def skip_message_suppressed(self) -> bool:
        return self.options.no_skip_message or bool(os.environ.get("QUICKTEST_NO_SKIP_MSG"))

    def summary(self) -> str:
        extra = ""
        if (
            any(r.skipped for r in self.results)
            and not self.options.verbose
            and not self.skip_message_suppressed()
        ):
            extra = SKIP_HINT

        return "%d runs, %d assertions, %d failures, %d errors, %d skips%s" % (
            self.count,
            self.assertions,
            self.failures or 0,
            self.errors or 0,
            self.skips or 0,
            extra,
        )


class CompositeReporter(AbstractReporter):
    """Dispatches to several reporters as one."""

    def __init__(self, *reporters: AbstractReporter):
        self.reporters: list[AbstractReporter] = list(reporters)

    def add(self, reporter: AbstractReporter) -> "CompositeReporter":
        """Add another reporter to the mix."""
        self.reporters.append(reporter)
        return self

    def passed(self) -> bool:
        return all(r.passed() for r in self.reporters)

    def start(self) -> None:
        for reporter in self.reporters:
            reporter.start()

    def record(self, result: Result) -> None:
        for reporter in self.reporters:
            reporter.record(result)

    def report(self) -> None:
        for reporter in self.reporters:
            reporter.report()

    def current_results(self) -> str:
        return "".join(r.current_results() for r in self.reporters)
