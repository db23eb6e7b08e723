"""Include/exclude masks selecting tests by qualified name."""

import re
from collections.abc import Iterable, Sequence

from best.models.base import Model

MASK_PATTERN = re.compile(r"^(-)?([^/-][^/]*(?:/[^/]+)*)$")


class InvalidMaskError(ValueError):
    """Raised when one or more mask patterns are malformed."""

    def __init__(self, patterns: Sequence[str]) -> None:
        self.patterns = tuple(patterns)
        super().__init__(f"invalid mask(s): {', '.join(self.patterns)}")


class Mask(Model):
    """A compiled test-name filter.

    A mask matches a qualified name when the name equals the mask path or is
    nested below it, compared segment by segment: ``a/b`` matches ``a/b`` and
    ``a/b/c`` but never ``a/bc``.
    """

    segments: tuple[str, ...]
    negate: bool = False

    @property
    def path(self) -> str:
        """The mask path without its negation prefix."""
        return "/".join(self.segments)

    def matches(self, name: str) -> bool:
        """Check whether a qualified test name falls under this mask."""
        parts = tuple(name.split("/"))
        return parts[: len(self.segments)] == self.segments


def parse_mask(pattern: str) -> Mask | None:
    """Compile a single pattern, returning None when it is malformed.

    Leading and trailing slashes are ignored. A leading ``-`` negates the mask.
    """
    match = MASK_PATTERN.match(pattern.strip("/"))
    if match is None:
        return None
    return Mask(segments=tuple(match.group(2).split("/")), negate=bool(match.group(1)))


def parse_masks(patterns: Iterable[str]) -> tuple[Sequence[Mask], bool]:
    """Compile command-line patterns into masks and the whitelist flag.

    Args:
        patterns: Raw patterns in command-line order

    Returns:
        The compiled masks (same order) and whether whitelist mode is active,
        i.e. whether at least one non-negated mask was supplied

    Raises:
        InvalidMaskError: If any pattern is malformed; lists all of them

    """
    masks: list[Mask] = []
    invalid: list[str] = []

    for pattern in patterns:
        if (mask := parse_mask(pattern)) is None:
            invalid.append(pattern)
        else:
            masks.append(mask)

    if invalid:
        raise InvalidMaskError(invalid)

    whitelist = any(not mask.negate for mask in masks)
    return masks, whitelist


def is_included(name: str, masks: Sequence[Mask], whitelist: bool) -> bool:
    """Decide whether a qualified test name is selected.

    Tests are included by default unless whitelist mode is active. Every
    matching mask overrides the running decision, so the last match wins.
    """
    included = not whitelist
    for mask in masks:
        if mask.matches(name):
            included = whitelist and not mask.negate
    return included
