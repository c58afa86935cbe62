"""Url-safe key generation for service, resource and type names."""

import re

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")


def split_into_words(value: str) -> list[str]:
    """Split on camelCase boundaries and any non-alphanumeric characters."""
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", value)
    return [w for w in _NON_ALPHANUMERIC.split(spaced) if w]


def generate(value: str) -> str:
    """Generate the canonical url key, e.g. ``"Order Items"`` -> ``"order-items"``."""
    return "-".join(w.lower() for w in split_into_words(value.strip()))


def pluralize(value: str) -> str:
    if value.endswith("y") and len(value) > 1 and value[-2] not in "aeiou":
        return value[:-1] + "ies"
    if value.endswith(("s", "x", "z", "ch", "sh")):
        return value + "es"
    return value + "s"
