"""Assertion helpers whose failures carry the compared values.

The runner renders a diff for any exception with ``actual`` and ``expected``
attributes; these helpers raise such exceptions.
"""

from collections.abc import Awaitable, Callable
from typing import Any


class AssertionMismatch(AssertionError):
    """Raised when two values do not compare as required."""

    def __init__(
        self, actual: Any, expected: Any, operator: str, message: str | None = None
    ) -> None:
        self.actual = actual
        self.expected = expected
        self.operator = operator
        super().__init__(message or f"{actual!r} {operator} {expected!r}")


def assert_equal(actual: Any, expected: Any, message: str | None = None) -> None:
    """Fail unless ``actual == expected``."""
    if not actual == expected:
        raise AssertionMismatch(actual, expected, "==", message)


def assert_not_equal(actual: Any, expected: Any, message: str | None = None) -> None:
    """Fail if ``actual == expected``."""
    if actual == expected:
        raise AssertionMismatch(actual, expected, "!=", message)


def _check_raised[E: BaseException](
    exc_type: type[E], error: BaseException | None
) -> E:
    if error is None:
        raise AssertionError(f"{exc_type.__name__} not raised")
    if not isinstance(error, exc_type):
        raise AssertionError(
            f"expected {exc_type.__name__}, got {type(error).__name__}: {error}"
        ) from error
    return error


def assert_raises[E: BaseException](
    exc_type: type[E], fn: Callable[..., Any], *args: Any, **kwargs: Any
) -> E:
    """Call ``fn`` and return the ``exc_type`` exception it raised."""
    error: BaseException | None = None
    try:
        fn(*args, **kwargs)
    except Exception as e:
        error = e
    return _check_raised(exc_type, error)


async def assert_raises_async[E: BaseException](
    exc_type: type[E], fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
) -> E:
    """Await ``fn`` and return the ``exc_type`` exception it raised."""
    error: BaseException | None = None
    try:
        await fn(*args, **kwargs)
    except Exception as e:
        error = e
    return _check_raised(exc_type, error)
