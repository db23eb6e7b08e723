"""Terminal rendering of test results."""

import difflib
import pprint
import shutil
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from best.models.result import FailureDetail, RunSummary, TestResult

PRIMITIVE_TYPES = (str, bytes, int, float, complex, bool)
DIFF_WIDTH = 60


def indent(text: str, width: int = 4) -> str:
    """Indent every line of ``text``."""
    pad = " " * width
    return "\n".join(pad + line for line in text.splitlines())


def left_pad(text: str, width: int) -> str:
    """Indent every line and drop the trailing whitespace this leaves."""
    pad = " " * width
    return (pad + text.replace("\n", "\n" + pad)).rstrip(" ")


def is_primitive(value: Any) -> bool:
    """Values that are shown side by side rather than diffed."""
    return value is None or isinstance(value, PRIMITIVE_TYPES)


def format_comparison(expected: Any, actual: Any, depth: int) -> str:
    """Render an expected/actual pair for a failure report.

    Two container-like values are rendered as a line diff where ``-`` lines
    come from the expected value and ``+`` lines from the actual one. When
    either side is a primitive both are dumped in full, one after the other.
    """
    if is_primitive(expected) or is_primitive(actual):
        return (
            f"expected:\n\n{indent(pprint.pformat(expected, depth=depth))}\n\n"
            f"actual:\n\n{indent(pprint.pformat(actual, depth=depth))}"
        )

    expected_lines = pprint.pformat(expected, width=DIFF_WIDTH).splitlines()
    actual_lines = pprint.pformat(actual, width=DIFF_WIDTH).splitlines()
    return "\n".join(
        line
        for line in difflib.ndiff(expected_lines, actual_lines)
        if not line.startswith("? ")
    )


def terminal_columns(stream: TextIO) -> int | None:
    """Width of the terminal behind ``stream``, or None when not a TTY."""
    if not stream.isatty():
        return None
    return shutil.get_terminal_size().columns


@dataclass(kw_only=True)
class Reporter:
    """Writes one status line per test, plus details for failures.

    On a terminal in non-verbose mode, passing lines overwrite each other so
    only failures remain on screen.
    """

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    verbose: bool = False
    depth: int = 3

    def __call__(self, result: TestResult) -> None:
        self.stream.write(self.render(result))
        self.stream.flush()

    def render(self, result: TestResult) -> str:
        """Render a single result."""
        # Columns are read per test since the terminal may be resized.
        columns = terminal_columns(self.stream)
        name = result.name if columns is None else result.name[: columns - 5]
        overwrite = columns is not None and not self.verbose

        message = f"\r{' ' * columns}\r" if overwrite else ""

        if result.failure is None:
            message += f"PASS {name}"
            if not overwrite:
                message += "\n"
            return message

        message += f"FAIL {name}\n"
        message += self.render_frames(result.failure)

        details = f"{self.render_comparison(result.failure)}\n"
        if self.verbose:
            details += f"\n{result.failure.traceback}\n\n"
            details = left_pad(details, 6)
        message += details

        if not self.verbose:
            message += "\n\n"
        return message

    def render_frames(self, failure: FailureDetail) -> str:
        """Short header naming where the failure originated."""
        if not failure.frames:
            return f"{failure.message}\n\n"
        return "\n".join(failure.frames) + f"\n{failure.message}\n\n"

    def render_comparison(self, failure: FailureDetail) -> str:
        """Expected/actual rendering, empty when the failure carries none."""
        if not failure.has_comparison:
            return ""
        return format_comparison(failure.expected, failure.actual, self.depth)

    def finish(self, summary: RunSummary) -> None:
        """Write the aggregate line for the run."""
        self.stream.write("\n")
        if summary.failures == 0:
            self.stream.write("ALL TESTS PASSED\n")
        else:
            self.stream.write(f"{summary.failures} TESTS FAILED\n")
        self.stream.flush()
