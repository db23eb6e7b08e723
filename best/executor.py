"""Sequential execution of a collected test suite."""

import inspect
import logging
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from best.models.result import FailureDetail, RunSummary, TestCase, TestResult

log = logging.getLogger(__name__)

MAX_HEADER_FRAMES = 2

ResultHandler = Callable[[TestResult], None]


def _ignore(result: TestResult) -> None:
    """Default result handler."""


def capture_failure(error: BaseException) -> FailureDetail:
    """Capture what a reporter needs from a raised exception."""
    frames = [
        frame
        for frame in traceback.extract_tb(error.__traceback__)
        if frame.filename != __file__
    ]
    header = [
        f'File "{frame.filename}", line {frame.lineno}, in {frame.name}'
        for frame in reversed(frames[-MAX_HEADER_FRAMES:])
    ]

    comparison: dict[str, Any] = {}
    if hasattr(error, "actual") and hasattr(error, "expected"):
        comparison = {"actual": error.actual, "expected": error.expected}

    return FailureDetail(
        message=str(error) or type(error).__name__,
        frames=header,
        traceback="".join(traceback.format_exception(error)),
        **comparison,
    )


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs tests one at a time, in suite order.

    Each test is awaited to completion before the next one starts. A failing
    test never stops the run.
    """

    __test__ = False

    on_result: ResultHandler = field(default=_ignore, repr=False)

    async def run_test(self, test: TestCase) -> TestResult:
        """Run a single test and capture its outcome."""
        log.debug("Running %s", test.name)
        try:
            outcome = test.fn()
            if inspect.isawaitable(outcome):
                await outcome
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            return TestResult(name=test.name, failure=capture_failure(e))
        return TestResult(name=test.name)

    async def run_suite(self, suite: Sequence[TestCase]) -> RunSummary:
        """Run every test and tally the failures.

        Args:
            suite: Tests in execution order

        Returns:
            Totals for the run; each result is handed to ``on_result`` as soon
            as its test completes and is not retained

        """
        failures = 0
        for test in suite:
            result = await self.run_test(test)
            self.on_result(result)
            failures += not result.passed

        log.debug("Executed %d test(s), %d failed", len(suite), failures)
        return RunSummary(total=len(suite), failures=failures)
