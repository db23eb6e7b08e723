"""Expand include directives into an ordered list of test source files."""

import glob
import logging
from collections.abc import Sequence
from pathlib import Path

log = logging.getLogger(__name__)


def expand_include(include: str, extensions: Sequence[str]) -> Sequence[Path]:
    """Expand one include directive.

    Directories are searched recursively for files with a recognized
    extension. Existing files are kept as-is. Anything else is treated as a
    glob pattern, where ``**`` matches any number of directories.
    """
    path = Path(include)

    if path.is_dir():
        return sorted(
            candidate
            for candidate in path.rglob("*")
            if candidate.is_file() and candidate.suffix in extensions
        )

    if path.is_file():
        return [path]

    return [
        Path(match)
        for match in sorted(glob.glob(include, recursive=True))
        if Path(match).is_file()
    ]


def discover_files(includes: Sequence[str], extensions: Sequence[str]) -> Sequence[Path]:
    """Collect test source files in include order, without duplicates.

    Args:
        includes: Directories, files or glob patterns, in command-line order
        extensions: Recognized test source extensions (e.g. ``(".py",)``)

    Returns:
        Files to load, in discovery order

    """
    seen: set[Path] = set()
    files: list[Path] = []

    for include in includes:
        for path in expand_include(include, extensions):
            if path in seen:
                continue
            seen.add(path)

            if path.suffix not in extensions:
                log.warning("ignoring file (not a script): %s", path.as_posix())
                continue

            files.append(path)

    return files
