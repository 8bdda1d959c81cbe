"""Sorted access to mapping keys."""

from __future__ import annotations

from collections.abc import Mapping


def map_keys(m) -> list[str]:
    """Return the keys of a string-keyed mapping in sorted order."""
    if not isinstance(m, Mapping):
        raise TypeError(f"map_keys expected a mapping with string keys, got {type(m).__name__}")
    keys = list(m)
    if not all(isinstance(k, str) for k in keys):
        raise TypeError("map_keys expected a mapping with string keys")
    return sorted(keys)