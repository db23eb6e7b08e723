"""Run configuration built once by the CLI and passed to every component."""

from collections.abc import Sequence

from pydantic import Field

from best.masks import Mask
from best.models.base import Model

DEFAULT_INCLUDE = "test"
DEFAULT_DEPTH = 3
TEST_EXTENSIONS = (".py",)


class RunConfig(Model):
    """Immutable options for a single test run."""

    verbose: bool = Field(default=False, description="Verbose diagnostics")
    masks: Sequence[Mask] = Field(
        default=(), description="Include/exclude masks in command-line order"
    )
    whitelist: bool = Field(
        default=False, description="Exclude tests unless a mask selects them"
    )
    includes: Sequence[str] = Field(
        default=(DEFAULT_INCLUDE,), description="Test source directories/files/globs"
    )
    imports: Sequence[str] = Field(
        default=(), description="Modules imported before collecting tests"
    )
    depth: int = Field(
        default=DEFAULT_DEPTH, ge=0, description="Nesting depth for failure values"
    )
    extensions: Sequence[str] = Field(
        default=TEST_EXTENSIONS, description="Recognized test source extensions"
    )
