"""Build the ordered test suite from test source files."""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from types import ModuleType

from best.loader import load_module, module_exports
from best.masks import is_included
from best.models.config import RunConfig
from best.models.result import TestCase

log = logging.getLogger(__name__)

ModuleLoader = Callable[[Path], ModuleType]


def qualified_name(path: Path, export_name: str) -> str:
    """Name a test by its source path (sans extension) and export name."""
    return f"{path.with_suffix('').as_posix()}/{export_name}"


def collect_module(
    path: Path, module: ModuleType, config: RunConfig
) -> tuple[Sequence[TestCase], int]:
    """Select the tests exported by one loaded module.

    Returns:
        The selected tests in export order, and the number of callable
        exports found before mask filtering

    """
    tests: list[TestCase] = []
    valid = 0

    for export_name, value in module_exports(module).items():
        name = qualified_name(path, export_name)

        if not callable(value):
            log.warning("skipping non-function test: %s", name)
            continue

        valid += 1
        if is_included(name, config.masks, config.whitelist):
            tests.append(TestCase(name=name, fn=value))
        else:
            log.debug("excluded by mask: %s", name)

    return tests, valid


def collect_suite(
    files: Sequence[Path],
    config: RunConfig,
    loader: ModuleLoader = load_module,
) -> Sequence[TestCase]:
    """Load every file and concatenate their selected tests.

    Files are loaded in discovery order and a load failure propagates
    immediately. Duplicate qualified names are kept; both tests run.
    """
    suite: list[TestCase] = []

    for path in files:
        module = loader(path)
        tests, valid = collect_module(path, module, config)

        if valid == 0 and config.verbose:
            log.warning("test file has no valid tests: %s", path.as_posix())

        suite.extend(tests)

    return suite
