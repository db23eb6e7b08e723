"""Loading of test sources and pre-run imports as Python modules."""

import importlib
import importlib.util
import re
import sys
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

MODULE_PREFIX = "__best__"


class ModuleLoadError(Exception):
    """Raised when a test source or required module cannot be imported."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        super().__init__(f"cannot load {target}: {reason}")


def module_name_for(path: Path) -> str:
    """Derive an importable module name for a test source path."""
    parts = path.with_suffix("").as_posix().strip("/").split("/")
    cleaned = [re.sub(r"\W", "_", part) or "_" for part in parts if part != "."]
    return ".".join([MODULE_PREFIX, *cleaned])


def unique_module_name(name: str, resolved: Path) -> str:
    """Suffix ``name`` until it is free or already belongs to ``resolved``."""
    candidate, counter = name, 1
    while (existing := sys.modules.get(candidate)) is not None:
        if getattr(existing, "__file__", None) == str(resolved):
            break
        counter += 1
        candidate = f"{name}_{counter}"
    return candidate


def load_module(path: Path) -> ModuleType:
    """Execute a source file as a module and return it.

    Args:
        path: Path to the source file, relative or absolute

    Returns:
        The executed module, also registered in ``sys.modules``

    Raises:
        ModuleLoadError: If the file is missing or cannot be executed; the
            underlying error is chained

    """
    resolved = path.resolve()
    if not resolved.is_file():
        raise ModuleLoadError(str(path), "file not found")

    name = unique_module_name(module_name_for(path), resolved)
    spec = importlib.util.spec_from_file_location(name, resolved)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(str(path), "not an importable source file")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise ModuleLoadError(str(path), f"{type(e).__name__}: {e}") from e

    return module


def import_requirement(requirement: str) -> ModuleType:
    """Import a module for its side effects before tests are collected.

    ``requirement`` is either a dotted module name or a path to a source file.
    """
    if requirement.endswith(".py") or Path(requirement).is_file():
        return load_module(Path(requirement))

    try:
        return importlib.import_module(requirement)
    except Exception as e:
        raise ModuleLoadError(requirement, f"{type(e).__name__}: {e}") from e


def module_exports(module: ModuleType) -> Mapping[str, Any]:
    """Enumerate the exported bindings of a module in a stable order.

    ``__all__`` is authoritative when present. Otherwise every public name
    bound in the module is exported in definition order, except submodules
    and objects that were defined in another module.
    """
    namespace = vars(module)

    if (names := namespace.get("__all__")) is not None:
        return {name: getattr(module, name) for name in names}

    exports: dict[str, Any] = {}
    for name, value in namespace.items():
        if name.startswith("_") or isinstance(value, ModuleType):
            continue
        origin = getattr(value, "__module__", module.__name__)
        if callable(value) and origin != module.__name__:
            continue
        exports[name] = value
    return exports
