"""Process-scoped registry of runnable classes and reporter configurators."""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Iterator

if TYPE_CHECKING:
    from quicktest.options import RunOptions
    from quicktest.reporters import CompositeReporter
    from quicktest.runnable import Runnable

logger = logging.getLogger(__name__)

Configurator = Callable[["CompositeReporter", "RunOptions"], Any]


class Registry:
    """Ordered, append-only collection of runnable classes.

    Classes are kept in registration order. Registration is guarded by a
    lock so modules loaded from several threads can register safely.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.init()

    def init(self) -> None:
        """Start from an empty registry."""
        with self._lock:
            self._runnables: list[type["Runnable"]] = []
            self._configurators: list[Configurator] = []

    def reset(self) -> None:
        """Drop every registered runnable and configurator."""
        logger.debug("Resetting registry with %d runnables", len(self))
        self.init()

    def register(self, klass: type["Runnable"]) -> type["Runnable"]:
        with self._lock:
            self._runnables.append(klass)
        logger.debug("Registered %s", klass.__name__)
        return klass

    @property
    def runnables(self) -> tuple[type["Runnable"], ...]:
        with self._lock:
            return tuple(self._runnables)

    def add_configurator(self, configurator: Configurator) -> Configurator:
        """Register a callback that adjusts the reporter chain before a run.

        Can be used as a decorator.
        """
        with self._lock:
            self._configurators.append(configurator)
        return configurator

    @property
    def configurators(self) -> tuple[Configurator, ...]:
        with self._lock:
            return tuple(self._configurators)

    def configure(self, reporter: "CompositeReporter", options: "RunOptions") -> None:
        """Invoke configurators in registration order."""
        for configurator in self.configurators:
            logger.debug("Applying configurator %r", configurator)
            configurator(reporter, options)

    def __len__(self) -> int:
        return len(self._runnables)

    def __iter__(self) -> Iterator[type["Runnable"]]:
        return iter(self.runnables)


default_registry = Registry()
