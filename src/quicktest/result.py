"""Result of running a single test method."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from quicktest.errors import Failure, Skip, UnexpectedError

if TYPE_CHECKING:
    from quicktest.runnable import Runnable


@dataclass
class Result:
    """Outcome of one method run, detached from the instance that ran it."""

    klass: str = ""
    name: str = ""
    assertions: int = 0
    failures: list[Failure] = field(default_factory=list)
    time: float = 0.0
    source_location: Optional[str] = None

    @classmethod
    def from_runnable(cls, runnable: "Runnable") -> "Result":
        """Create a result from a finished runnable instance."""
        return cls(
            klass=type(runnable).__name__,
            name=runnable.name,
            assertions=runnable.assertions,
            failures=list(runnable.failures),
            time=getattr(runnable, "time", 0.0),
            source_location=runnable.source_location(),
        )

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
    def error(self) -> bool:
        return isinstance(self.failure, UnexpectedError)

    @property
    def kind(self) -> str:
        if self.passed:
            return "pass"
        if self.skipped:
            return "skip"
        if self.error:
            return "error"
        return "failure"

    @property
    def result_code(self) -> str:
        """Single character to print: ".", "F", "E" or "S"."""
        if self.failure is None:
            return "."
        return self.failure.result_code

    @property
    def location(self) -> str:
        # Errors carry their own backtrace in the message.
        loc = f" [{self.failure.location()}]" if self.failure and not self.error else ""
        return f"{self.klass}#{self.name}{loc}"

    def __str__(self) -> str:
        if self.passed:
            return ""

        return "\n".join(
            f"{failure.result_label}:\n{self.location}:\n{failure.message}\n"
            for failure in self.failures
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        failure = self.failure
        return {
            "class": self.klass,
            "name": self.name,
            "kind": self.kind,
            "result_code": self.result_code,
            "assertions": self.assertions,
            "time": self.time,
            "source_location": self.source_location,
            "message": failure.message if failure else None,
            "location": failure.location() if failure else None,
        }
