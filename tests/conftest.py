"""Shared fixtures: throwaway projects holding test sources."""

import sys
from collections.abc import Generator
from pathlib import Path
from textwrap import dedent
from typing import Protocol

import pytest

from best.loader import MODULE_PREFIX


class WriteSourceFn(Protocol):
    """Protocol for test source creation function."""

    def __call__(self, relative_path: str, source: str) -> Path:
        """Write a source file into the project and return its relative path."""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an empty project directory and make it the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_source(project: Path) -> WriteSourceFn:
    """Return a function to write test sources into the project."""

    def _write(relative_path: str, source: str) -> Path:
        path = project / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(source))
        return Path(relative_path)

    return _write


@pytest.fixture(autouse=True)
def _forget_loaded_sources() -> Generator[None]:
    """Drop test sources loaded by the runner so tests stay independent."""
    yield
    for name in [n for n in sys.modules if n.startswith(f"{MODULE_PREFIX}.")]:
        del sys.modules[name]
