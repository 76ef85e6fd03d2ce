#!/usr/bin/env python3
"""
KUBEMANIFEST VALUES - Generic Document Tree
-------------------------------------------
Decoded documents are plain Python trees: dict (string keys), list, str,
int, float, bool and None. This module converts whatever the YAML loader
produced into that shape and offers safe nested lookups.

Author: KubeManifest Team
Date: 2026-10-18
"""

import base64
import datetime
from typing import Any, Mapping


class _Missing:
    """Marker returned by lookup() when a path does not exist."""

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


def lookup(tree: Any, *path: str) -> Any:
    """
    Walks nested mappings along `path`.
    Returns MISSING instead of raising when any hop is absent or not a mapping.
    """
    node = tree
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            return MISSING
        node = node[key]
    return node


def lookup_str(tree: Any, *path: str) -> str:
    """Like lookup(), but yields "" for anything that is not a string."""
    value = lookup(tree, *path)
    return value if isinstance(value, str) else ""


def _key_text(key: Any) -> str:
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


class KeyCollisionError(ValueError):
    """Two distinct mapping keys render to the same string key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"mapping key {key!r} appears more than once after conversion to string")


def normalize(value: Any) -> Any:
    """
    Converts loader output into JSON-compatible values.

    - mapping keys become strings (true/false/null for bool/None keys)
    - timestamps become ISO-8601 strings
    - !!binary becomes base64 text
    - !!set becomes a sorted list, tuples/pairs become lists

    Raises KeyCollisionError when keys such as 1 and "1" share a mapping.
    """
    if isinstance(value, Mapping):
        result = {}
        for k, v in value.items():
            key = _key_text(k)
            if key in result:
                raise KeyCollisionError(key)
            result[key] = normalize(v)
        return result
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_key_text(item) for item in value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if value is None or isinstance(value, (str, bool, int, float)):
        # ruamel scalar subclasses (ScalarFloat, ...) collapse to builtins
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, str):
            return str(value)
        if isinstance(value, int):
            return int(value)
        return float(value)
    return str(value)
