"""Models for collected tests and their execution results."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

TestFunction = Callable[[], Any]

NO_VALUE = object()


@dataclass(frozen=True, kw_only=True)
class TestCase:
    """A single collected test: its qualified name and the callable to run."""

    __test__ = False

    name: str
    fn: TestFunction = field(repr=False)


@dataclass(frozen=True, kw_only=True)
class FailureDetail:
    """Captured failure of a test.

    Frames are the originating stack frames, innermost first, each already
    formatted as a single line. The comparison payload is only present when
    the raised exception carried both ``actual`` and ``expected``.
    """

    message: str
    frames: Sequence[str] = ()
    traceback: str = ""
    expected: Any = field(default=NO_VALUE, repr=False)
    actual: Any = field(default=NO_VALUE, repr=False)

    @property
    def has_comparison(self) -> bool:
        """Whether an expected/actual payload is available for diffing."""
        return self.expected is not NO_VALUE and self.actual is not NO_VALUE


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of a single test execution."""

    __test__ = False

    name: str
    failure: FailureDetail | None = None

    @property
    def passed(self) -> bool:
        """Whether the test completed without raising."""
        return self.failure is None


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Aggregate outcome of a whole run."""

    total: int = 0
    failures: int = 0

    @property
    def exit_code(self) -> int:
        """Process exit status for this run."""
        return 1 if self.failures else 0
