"""Command-line interface for quicktest."""

import logging
import random
import re
import signal
import sys
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from quicktest import __version__
from quicktest.config import LOG_LEVELS, QuicktestConfig
from quicktest.options import RunOptions
from quicktest.registry import default_registry
from quicktest.runnable import CancellationToken, compile_filter
from quicktest.runner import TestRunner, build_reporter, load_modules

console = Console(stderr=True)

logger = logging.getLogger(__name__)


def print_banner() -> None:
    """Print the quicktest banner."""
    console.print(
        Panel.fit(
            "[bold blue]quicktest[/bold blue] - unit test runner",
            subtitle=f"v{__version__}",
        )
    )


def build_orig_args(seed: int, verbose: bool, pattern: Optional[str]) -> list[str]:
    """Arguments as they are echoed in the run header."""
    args = ["--seed", str(seed)]
    if verbose:
        args.append("--verbose")
    if pattern is not None:
        args.extend(["--name", pattern])
    return args


def install_signal_handlers(cancel: CancellationToken) -> dict[int, object]:
    """Route SIGINT (and SIGINFO where it exists) to the cancellation token.

    A second SIGINT aborts immediately.
    """

    def handler(signum, frame):
        if cancel.cancelled and signum == signal.SIGINT:
            raise KeyboardInterrupt
        cancel.cancel()

    previous = {}
    for name in ("SIGINT", "SIGINFO"):
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, handler)
    return previous


def restore_signal_handlers(previous: dict[int, object]) -> None:
    for signum, old_handler in previous.items():
        signal.signal(signum, old_handler)


@click.command()
@click.version_option(version=__version__, prog_name="quicktest")
@click.option("--seed", "-s", type=int, help="Sets random seed")
@click.option("--verbose", "-v", is_flag=True, help="Verbose. Show progress processing files.")
@click.option("--name", "-n", "pattern", help="Filter run on /pattern/ or string.")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: quicktest.json)",
)
@click.option("--module", "-m", "modules", multiple=True, help="Module to import before running (repeatable)")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
def main(
    seed: Optional[int],
    verbose: bool,
    pattern: Optional[str],
    config: Optional[str],
    modules: tuple[str, ...],
    log_level: Optional[str],
) -> None:
    """quicktest - run registered test units and report the results."""
    print_banner()

    # Load configuration
    try:
        if config:
            settings = QuicktestConfig.from_file(config)
        else:
            settings = QuicktestConfig.find_and_load()
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    settings.apply()

    if pattern is not None:
        try:
            compile_filter(pattern)
        except re.error as e:
            raise click.BadParameter(f"invalid pattern: {e}", param_hint="--name")

    if seed is None:
        seed = random.randrange(0xFFFF)
    random.seed(seed)
    logger.debug("Using seed %d", seed)

    options = RunOptions(
        seed=seed,
        verbose=verbose,
        filter=pattern,
        orig_args=build_orig_args(seed, verbose, pattern),
        no_skip_message=settings.no_skip_message,
    )

    try:
        load_modules([*settings.modules, *modules])
    except ImportError as e:
        console.print(f"[red]Error loading tests:[/red] {e}")
        sys.exit(1)

    if not len(default_registry):
        console.print("[yellow]No tests registered[/yellow]")

    cancel = CancellationToken()
    previous = install_signal_handlers(cancel)
    try:
        reporter = build_reporter(sys.stdout, options, default_registry)
        passed = TestRunner(reporter, options, default_registry, cancel).run()
    finally:
        restore_signal_handlers(previous)

    if cancel.cancelled:
        console.print("[yellow]Run interrupted[/yellow]")

    sys.exit(0 if passed else 1)


if __name__ == "__main__":
    main()
