"""Placeholder substitution for stub text."""

from __future__ import annotations

import re
from collections.abc import Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.-]*)\s*\}\}")


def render(template: str, placeholders: Mapping[str, str]) -> str:
    """Replace each ``{{key}}`` token with its mapped value.

    Substitution is a single pass over the template, so values that happen
    to contain tokens are inserted literally and never re-expanded. Tokens
    without a matching key are left verbatim.
    """

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in placeholders:
            return str(placeholders[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def find_placeholders(template: str) -> list[str]:
    """Return the distinct placeholder keys in order of first appearance."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def unresolved_placeholders(
    template: str, placeholders: Mapping[str, str]
) -> list[str]:
    """Return the keys `render` would leave untouched."""
    return [key for key in find_placeholders(template) if key not in placeholders]
