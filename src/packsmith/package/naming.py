"""Canonical identifiers derived from raw vendor/package names.

Every function here is pure: the same input always yields the same output,
so identifiers can be recomputed per artifact without drifting apart.
"""

from __future__ import annotations

import re

NAMESPACE_SEPARATOR = "\\"

_SEPARATORS = re.compile(r"[-_\s]+")
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_ES_SUFFIXES = ("s", "x", "z", "ch", "sh")
_VOWELS = "aeiou"
_IRREGULAR = {
    "child": "children",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "mouse": "mice",
    "ox": "oxen",
    "person": "people",
    "tooth": "teeth",
    "woman": "women",
}
_UNCOUNTABLE = frozenset(
    {"data", "equipment", "fish", "information", "media", "metadata", "news",
     "series", "sheep", "species"}
)


def _words(raw: str) -> list[str]:
    """Split a raw kebab/snake/space separated string into words."""
    return [w for w in _SEPARATORS.split(raw.strip()) if w]


def class_name_from(raw: str) -> str:
    """Convert a kebab/snake string to StudlyCase.

    Separators are normalised first, so ``blog-module``, ``blog_module`` and
    ``blog--module`` all become ``BlogModule``.
    """
    return "".join(w[:1].upper() + w[1:] for w in _words(raw))


def namespace_from(vendor: str, raw: str) -> str:
    """Root namespace: ``acme`` + ``blog-module`` -> ``Acme\\BlogModule``."""
    return NAMESPACE_SEPARATOR.join((class_name_from(vendor), class_name_from(raw)))


def snake_case(value: str) -> str:
    """Convert StudlyCase or kebab-case to snake_case."""
    parts: list[str] = []
    for word in _words(value):
        parts.extend(_WORD_BOUNDARY.split(word))
    return "_".join(p.lower() for p in parts if p)


def pluralize(word: str) -> str:
    """Pluralize an English word.

    Irregular and uncountable nouns are looked up first, then the regular
    suffix rules apply. The first letter's case is preserved.
    """
    if not word:
        return word
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
        return word[0] + plural[1:]
    if lower.endswith("sis"):
        return word[:-2] + "es"
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith(_ES_SUFFIXES):
        return word + "es"
    return word + "s"


def table_name_from(class_name: str) -> str:
    """Database table for a model class: snake-cased plural of the last word.

    ``BlogModule`` -> ``blog_modules``, ``Category`` -> ``categories``.
    """
    words = snake_case(class_name).split("_")
    words[-1] = pluralize(words[-1])
    return "_".join(words)


def title_from(raw: str) -> str:
    """Human title for READMEs: ``blog-module`` -> ``Blog Module``."""
    return " ".join(w[:1].upper() + w[1:] for w in _words(raw))
