"""CLI entry point for the best test runner."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Iterable, Mapping, Sequence
from typing import TextIO

from pydantic import ValidationError

from best.collector import collect_suite
from best.discovery import discover_files
from best.executor import TestExecutor
from best.loader import import_requirement
from best.masks import InvalidMaskError, parse_masks
from best.models.config import DEFAULT_DEPTH, DEFAULT_INCLUDE, RunConfig
from best.reporter import Reporter

log = logging.getLogger("best")

USAGE_EXIT_CODE = 2
DEPTH_ENV_VAR = "BEST_DEPTH"

OPTIONS_WITH_VALUE = {"-I", "--include", "-i", "-r", "--import"}
FLAGS = {"-v", "--verbose", "--help"}
LONG_OPTIONS_WITH_VALUE = ("--include=", "--import=")

HELP_TEXT = """
  best

  A dead simple test runner.

  - Define public functions in a test source and they're evaluated
  - Function names become test names
  - Coroutine functions are awaited upon

  USAGE

    best --help
    best [-I /dir/or/file [-I ...]] [-i module [-i ...]] [-v] [test_name...]

    test_names correspond to the names of the functions defined within test
    sources, prefixed with the path of the source file (sans extension) in
    which they were defined.

    For example, the following test function inside test/foo.py:

        async def my_example_test():
            assert foo == bar

    would translate to the test_name:

        test/foo/my_example_test

    Specify one or more (optional) test_names to only run certain tests (or
    prefix with - to skip the named test). Everything after -- is taken as a
    test_name.

  OPTIONS

    --help                         Shows this help message

    -v, --verbose                  Shows more verbose test results

    -I, --include /dir/or/file     Uses one or more directories/files/globs as
                                   test sources. Defaults to ./test/**/*.py if
                                   no include directives are specified

    -i, -r, --import module        Imports a module or a script prior to
                                   running tests

  ENVIRONMENT

    BEST_DEPTH                     Nesting depth used when printing failure
                                   values (default: 3)
"""


class UsageError(Exception):
    """Raised when the command line cannot be turned into a run."""


def split_arguments(argv: Iterable[str]) -> tuple[Sequence[str], Sequence[str]]:
    """Separate option arguments from test name patterns.

    Patterns may start with ``-`` to negate them, so any token that is not a
    known option is a pattern, malformed ones included. Every token after ``--``
    is a pattern. Pattern order is preserved.
    """
    options: list[str] = []
    patterns: list[str] = []
    tokens = iter(argv)

    for token in tokens:
        if token == "--":
            patterns.extend(tokens)
            break
        if token in OPTIONS_WITH_VALUE:
            options.append(token)
            if (value := next(tokens, None)) is not None:
                options.append(value)
        elif token in FLAGS or token.startswith(LONG_OPTIONS_WITH_VALUE):
            options.append(token)
        else:
            patterns.append(token)

    return options, patterns


def build_parser() -> argparse.ArgumentParser:
    """Create the option parser; test name patterns are handled separately."""
    parser = argparse.ArgumentParser(prog="best", add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-I", "--include", action="append", default=[])
    parser.add_argument(
        "-i", "-r", "--import", dest="imports", action="append", default=[]
    )
    return parser


def build_config(
    argv: Sequence[str], environ: Mapping[str, str] = os.environ
) -> RunConfig | None:
    """Turn command-line arguments into a run configuration.

    Returns:
        The configuration, or None when help was requested

    Raises:
        InvalidMaskError: If any test name pattern is malformed
        UsageError: If an environment setting is invalid

    """
    options, patterns = split_arguments(argv)
    args = build_parser().parse_args(options)

    if args.help:
        return None

    masks, whitelist = parse_masks(patterns)

    try:
        return RunConfig(
            verbose=args.verbose,
            masks=masks,
            whitelist=whitelist,
            includes=args.include or [DEFAULT_INCLUDE],
            imports=args.imports,
            depth=environ.get(DEPTH_ENV_VAR, DEFAULT_DEPTH),
        )
    except ValidationError as e:
        raise UsageError(f"invalid {DEPTH_ENV_VAR}: {environ[DEPTH_ENV_VAR]}") from e


async def run(config: RunConfig, stream: TextIO | None = None) -> int:
    """Import requirements, collect the suite, run it and return exit code."""
    for requirement in config.imports:
        if config.verbose:
            log.info("importing %s", requirement)
        import_requirement(requirement)

    files = discover_files(config.includes, config.extensions)
    if not files:
        log.warning("no test files specified")
        return 0

    suite = collect_suite(files, config)
    if not suite:
        log.warning("no tests to run")
        return 0

    log.debug("Running %d test(s) from %d file(s)", len(suite), len(files))

    reporter = Reporter(
        stream=stream or sys.stdout, verbose=config.verbose, depth=config.depth
    )
    summary = await TestExecutor(on_result=reporter).run_suite(suite)
    reporter.finish(summary)

    return summary.exit_code


def configure_logging() -> None:
    """Send diagnostics to stderr."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    log.setLevel(logging.INFO)


def main() -> None:
    """CLI entry point."""
    argv = sys.argv[1:]
    configure_logging()

    try:
        config = build_config(argv)
    except InvalidMaskError as e:
        for pattern in e.patterns:
            log.error("invalid mask: %s", pattern)
        sys.exit(USAGE_EXIT_CODE)
    except UsageError as e:
        log.error("%s", e)
        sys.exit(USAGE_EXIT_CODE)

    if config is None:
        print(HELP_TEXT, file=sys.stderr)
        sys.exit(USAGE_EXIT_CODE)

    if config.verbose:
        log.setLevel(logging.DEBUG)

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        exit_code = asyncio.run(run(config))
    except Exception:
        log.exception("run aborted")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
