"""Dot-notation lookups into untyped payload trees."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class _Missing:
    """Marker for a path that does not resolve to anything."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def resolve(root: Any, path: str) -> Any:
    """Extract a value from ``root`` using a dotted path like ``payload.user.name``.

    Only mappings are indexed. Walking into a scalar, a sequence or a missing
    key yields ``MISSING``; this never raises.
    """
    if not isinstance(path, str):
        return MISSING

    value = root
    for key in path.split("."):
        if isinstance(value, Mapping) and key in value:
            value = value[key]
        else:
            return MISSING
    return value
