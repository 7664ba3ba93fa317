"""
quicktest - a small unit test engine.

This package provides:
- Test classes that register themselves when defined
- Method filtering by exact name or /regex/
- Isolated execution with failure, skip and error classification
- A composable chain of reporters for progress and summaries
"""

__version__ = "0.1.0"

from quicktest.errors import Failure, Skip, UnexpectedError
from quicktest.options import RunOptions
from quicktest.registry import Registry, default_registry
from quicktest.reporters import (
    AbstractReporter,
    CompositeReporter,
    ProgressReporter,
    Reporter,
    StatisticsReporter,
    SummaryReporter,
)
from quicktest.result import Result
from quicktest.runnable import CancellationToken, Runnable
from quicktest.runner import TestRunner, build_reporter
from quicktest.test import Test

__all__ = [
    "AbstractReporter",
    "CancellationToken",
    "CompositeReporter",
    "Failure",
    "ProgressReporter",
    "Registry",
    "Reporter",
    "Result",
    "RunOptions",
    "Runnable",
    "Skip",
    "StatisticsReporter",
    "SummaryReporter",
    "Test",
    "TestRunner",
    "UnexpectedError",
    "build_reporter",
    "default_registry",
]
