"""YAML decoding into dataclasses, with alternative key names per field.

A field's YAML key comes from ``metadata["yaml"]`` (default: the field name in
lower case). Extra keys are given as ``metadata["yaml_aliases"]``, either a
comma-separated string or a sequence of strings. Fields whose names start with
an underscore are ignored.
"""

from __future__ import annotations

import dataclasses

import yaml


class AliasClashError(ValueError):
    """Two fields or aliases map to the same YAML key."""


def _aliases(f: dataclasses.Field) -> list[str]:
    raw = f.metadata.get("yaml_aliases")
    if raw is None:
        return []
    if isinstance(raw, str):
        return raw.split(",")
    return list(raw)


def field_names(cls) -> dict[str, str]:
    """Map every YAML key, aliases included, to the dataclass field it sets."""
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"expected a dataclass, got {cls!r}")

    keys: dict[str, str] = {}
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        tag = f.metadata.get("yaml")
        name = tag.split(",")[0] if tag is not None else ""
        candidates = [] if name == "-" else [name or f.name.lower()]
        candidates.extend(_aliases(f))
        for key in candidates:
            if key in keys:
                raise AliasClashError(
                    f"duplicated key {key!r} for fields {keys[key]!r} and {f.name!r}"
                )
            keys[key] = f.name
    return keys


def _decode(data, target, strict: bool):
    if isinstance(target, type) or not dataclasses.is_dataclass(target):
        raise TypeError(f"target must be a dataclass instance, got {target!r}")
    keys = field_names(target)

    if isinstance(data, bytes):
        data = data.decode("utf-8")
    document = yaml.safe_load(data)
    if document is None:
        return target
    if not isinstance(document, dict):
        raise ValueError(
            f"cannot decode YAML {type(document).__name__} into {type(target).__name__}"
        )

    for key, value in document.items():
        key = key if isinstance(key, str) else str(key)
        name = keys.get(key)
        if name is None:
            if strict:
                raise ValueError(f"field {key} not found in type {type(target).__name__}")
            continue
        setattr(target, name, value)
    return target


def unmarshal(data, target):
    """Decode YAML ``data`` into the dataclass instance ``target``; unknown keys are ignored."""
    return _decode(data, target, strict=False)


def unmarshal_strict(data, target):
    """Like unmarshal, but raise ValueError on keys that match no field."""
    return _decode(data, target, strict=True)