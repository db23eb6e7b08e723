"""End-to-end runs of the CLI against real test sources."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from best.cli import main
from tests.conftest import WriteSourceFn

MAIN_SOURCE = """
import asyncio

from best.assertions import assert_equal

async def sleep10():
    await asyncio.sleep(0.01)

async def sleep20():
    await asyncio.sleep(0.02)

def adds():
    assert_equal(10 + 15, 25)
"""

MIXED_SOURCE = """
from best.assertions import assert_equal

RAN = []

def first():
    RAN.append("first")

def second():
    RAN.append("second")
    assert_equal({"total": 3, "items": [1, 2]}, {"total": 4, "items": [1, 2]})

async def third():
    RAN.append("third")
"""


def run_cli(*args: str) -> int:
    """Invoke the CLI entry point and return its exit code."""
    with patch("sys.argv", ["best", *args]), pytest.raises(SystemExit) as exc_info:
        main()
    code = exc_info.value.code
    assert isinstance(code, int)
    return code


def output_lines(out: str, prefix: str) -> list[str]:
    """Status lines with the given prefix, in output order."""
    return [line for line in out.splitlines() if line.startswith(prefix)]


def test_all_passing_suite_exits_zero(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """Passing tests are listed by qualified name and exit 0."""
    write_source("test/main.py", MAIN_SOURCE)

    assert run_cli() == 0

    out = capsys.readouterr().out
    assert output_lines(out, "PASS") == [
        "PASS test/main/sleep10",
        "PASS test/main/sleep20",
        "PASS test/main/adds",
    ]
    assert out.endswith("ALL TESTS PASSED\n")


def test_failure_does_not_stop_the_run(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """Later tests still run and the failure count sets exit 1."""
    write_source("test/mixed.py", MIXED_SOURCE)

    assert run_cli() == 1

    out = capsys.readouterr().out
    assert output_lines(out, "PASS") == ["PASS test/mixed/first", "PASS test/mixed/third"]
    assert output_lines(out, "FAIL") == ["FAIL test/mixed/second"]
    assert out.index("FAIL test/mixed/second") < out.index("PASS test/mixed/third")
    assert "in second" in out
    assert "- {'items': [1, 2], 'total': 4}" in out
    assert "+ {'items': [1, 2], 'total': 3}" in out
    assert out.endswith("1 TESTS FAILED\n")


def test_runs_files_in_discovery_order(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """Include order, then export order, decides execution order."""
    write_source("specs/b.py", "def one():\n    pass\n\ndef two():\n    pass\n")
    write_source("checks/a.py", "def three():\n    pass\n")

    assert run_cli("-I", "specs", "-I", "checks") == 0

    assert output_lines(capsys.readouterr().out, "PASS") == [
        "PASS specs/b/one",
        "PASS specs/b/two",
        "PASS checks/a/three",
    ]


def test_masks_select_tests(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """A whitelist with a negated child runs only the remaining tests."""
    write_source("test/main.py", MAIN_SOURCE)
    write_source("test/other.py", "def elsewhere():\n    pass\n")

    assert run_cli("test/main", "-test/main/sleep20") == 0

    assert output_lines(capsys.readouterr().out, "PASS") == [
        "PASS test/main/sleep10",
        "PASS test/main/adds",
    ]


def test_negated_mask_alone_skips_one_test(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """Blacklist mode keeps every other test."""
    write_source("test/mixed.py", MIXED_SOURCE)

    assert run_cli("-test/mixed/second") == 0

    assert output_lines(capsys.readouterr().out, "PASS") == [
        "PASS test/mixed/first",
        "PASS test/mixed/third",
    ]


def test_non_function_exports_are_skipped(
    write_source: WriteSourceFn,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Constants are warned about and never executed."""
    write_source("test/mixed.py", MIXED_SOURCE)

    with caplog.at_level(logging.WARNING):
        run_cli()

    assert "skipping non-function test: test/mixed/RAN" in caplog.text
    assert "test/mixed/RAN" not in capsys.readouterr().out


def test_no_files_exits_zero(
    project: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """An empty project warns and succeeds."""
    with caplog.at_level(logging.WARNING):
        assert run_cli() == 0

    assert "no test files specified" in caplog.text


def test_invalid_mask_exits_two(write_source: WriteSourceFn) -> None:
    """Malformed patterns stop the run before any test executes."""
    write_source("test/main.py", MAIN_SOURCE)

    assert run_cli("a//b") == 2


def test_broken_test_file_exits_one(
    write_source: WriteSourceFn,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A module failing at import aborts the whole run."""
    write_source("test/a.py", "def fine():\n    pass\n")
    write_source("test/b.py", "raise RuntimeError('cannot start')\n")

    with caplog.at_level(logging.ERROR):
        assert run_cli() == 1

    assert "cannot start" in caplog.text
    assert "PASS" not in capsys.readouterr().out


def test_failing_import_exits_one(
    write_source: WriteSourceFn, caplog: pytest.LogCaptureFixture
) -> None:
    """A required module that cannot be imported is fatal."""
    write_source("test/main.py", MAIN_SOURCE)

    with caplog.at_level(logging.ERROR):
        assert run_cli("-i", "no_such_module_anywhere") == 1

    assert "no_such_module_anywhere" in caplog.text


def test_test_sources_can_import_project_modules(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """The working directory is importable from test sources."""
    write_source("helpers_for_best/__init__.py", "def add(a, b):\n    return a + b\n")
    write_source(
        "test/uses_helper.py",
        """
        from helpers_for_best import add

        def adds():
            assert add(20, 4) == 24
        """,
    )

    assert run_cli() == 0

    assert output_lines(capsys.readouterr().out, "PASS") == ["PASS test/uses_helper/adds"]


def test_exiting_test_does_not_end_the_run(
    write_source: WriteSourceFn, capsys: pytest.CaptureFixture[str]
) -> None:
    """A test calling sys.exit fails and later tests still run."""
    write_source(
        "test/exits.py",
        """
        import sys

        def one():
            pass

        def two():
            sys.exit(0)

        def three():
            pass
        """,
    )

    assert run_cli() == 1

    out = capsys.readouterr().out
    assert output_lines(out, "PASS") == ["PASS test/exits/one", "PASS test/exits/three"]
    assert output_lines(out, "FAIL") == ["FAIL test/exits/two"]
    assert out.endswith("1 TESTS FAILED\n")
