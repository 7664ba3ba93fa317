"""Tests for the command-line interface."""

import itertools
import json
import signal
import textwrap

import pytest
from click.testing import CliRunner

from quicktest import cli
from quicktest.cli import build_orig_args, install_signal_handlers, main, restore_signal_handlers
from quicktest.registry import default_registry
from quicktest.runnable import CancellationToken

_counter = itertools.count()


@pytest.fixture(autouse=True)
def clean_default_registry():
    default_registry.reset()
    yield
    default_registry.reset()


@pytest.fixture
def write_module(tmp_path, monkeypatch):
    """Write a uniquely named test module and return its import name."""
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.chdir(tmp_path)

    def write(source: str) -> str:
        name = f"quicktest_cli_sample_{next(_counter)}"
        (tmp_path / f"{name}.py").write_text(textwrap.dedent(source))
        return name

    return write


PASSING = """
    from quicktest import Test

    class Arithmetic(Test):
        def test_add(self):
            self.assert_equal(4, 2 + 2)

        def test_sub(self):
            self.assert_equal(0, 2 - 2)
"""

FAILING = """
    from quicktest import Test

    class Broken(Test):
        def test_add(self):
            self.assert_equal(5, 2 + 2)

        def test_skip(self):
            self.skip("later")
"""


class TestMain:
    """Tests for the quicktest command."""

    def test_passing_run(self, write_module):
        module = write_module(PASSING)

        result = CliRunner().invoke(main, ["-m", module, "--seed", "7"])

        assert result.exit_code == 0
        assert "Run options: --seed 7\n" in result.stdout
        assert "2 runs, 2 assertions, 0 failures, 0 errors, 0 skips" in result.stdout

    def test_failing_run(self, write_module):
        module = write_module(FAILING)

        result = CliRunner().invoke(main, ["-m", module])

        assert result.exit_code == 1
        assert "1) Failure:\nBroken#test_add [" in result.stdout
        assert "2 runs, 1 assertions, 1 failures, 0 errors, 1 skips" in result.stdout
        assert "You have skipped tests. Run with --verbose for details." in result.stdout

    def test_verbose(self, write_module):
        module = write_module(FAILING)

        result = CliRunner().invoke(main, ["-m", module, "-v", "-s", "3"])

        assert "Run options: --seed 3 --verbose\n" in result.stdout
        assert "Broken#test_skip = " in result.stdout
        assert "Skipped:\nBroken#test_skip [" in result.stdout
        assert "You have skipped tests" not in result.stdout

    def test_name_filter(self, write_module):
        module = write_module(PASSING)

        result = CliRunner().invoke(main, ["-m", module, "-n", "Arithmetic#test_sub"])

        assert result.exit_code == 0
        assert "1 runs, 1 assertions" in result.stdout

    def test_invalid_pattern(self, write_module):
        module = write_module(PASSING)

        result = CliRunner().invoke(main, ["-m", module, "-n", "/(oops/"])

        assert result.exit_code == 2

    def test_unknown_option(self):
        result = CliRunner().invoke(main, ["--bogus"])

        assert result.exit_code == 2

    def test_missing_module(self, write_module):
        result = CliRunner().invoke(main, ["-m", "quicktest_cli_not_there"])

        assert result.exit_code == 1
        assert "Error loading tests" in result.stderr

    def test_missing_config(self, tmp_path):
        result = CliRunner().invoke(main, ["-c", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.stderr

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "quicktest.json"
        config.write_text(json.dumps({"log_level": "chatty"}))

        result = CliRunner().invoke(main, ["-c", str(config)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stderr

    def test_modules_from_config(self, write_module, tmp_path):
        module = write_module(PASSING)
        (tmp_path / "quicktest.json").write_text(json.dumps({"modules": [module], "no_skip_message": True}))

        result = CliRunner().invoke(main, [])

        assert result.exit_code == 0
        assert "2 runs, 2 assertions" in result.stdout

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])

        assert result.exit_code == 0
        assert cli.__version__ in result.stdout


class TestHelpers:
    """Tests for CLI helpers."""

    def test_build_orig_args(self):
        assert build_orig_args(1, False, None) == ["--seed", "1"]
        assert build_orig_args(2, True, "/x/") == ["--seed", "2", "--verbose", "--name", "/x/"]

    def test_signal_handler_cancels(self):
        cancel = CancellationToken()
        previous = install_signal_handlers(cancel)
        try:
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)

            assert cancel.cancelled

            with pytest.raises(KeyboardInterrupt):
                handler(signal.SIGINT, None)
        finally:
            restore_signal_handlers(previous)

        assert signal.getsignal(signal.SIGINT) is previous[signal.SIGINT]
