"""
Canonical JSON serialization and hashing helpers for plot descriptions.

Provides a single canonical JSON policy and SHA-256 helpers so that two
equivalent specifications always produce the same fingerprint. This module is
zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - Tuples serialize as JSON arrays; non-JSON values (e.g. enums) must be
      converted by the caller.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_description",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_description(description: Mapping[str, Any]) -> str:
    """
    Hash a specification description using canonical JSON and SHA-256.

    Args:
        description (Mapping[str, Any]): Output of PlotSpec.describe().

    Returns:
        str: SHA-256 hex digest over the canonical JSON serialization.

    Examples:
        >>> from plotgrammar.core.hashing import hash_description
        >>> hash_description({"a": 1, "b": 2}) == hash_description({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(dict(description)))
