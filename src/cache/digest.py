# src/cache/digest.py — v1
"""Canonical, key-order-independent digests for structured values.

The byte stream is close to compact JSON except that strings are not escaped
and every container element is followed by a separator, including the last.
Neither shortcut affects determinism, which is the only property relied on:
two values that differ only in mapping key order digest identically.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel

from compilecache.cache.models import CacheKey, CompilerIdentity


class Hasher(Protocol):
    """Anything with a hashlib-style update()."""

    def update(self, data: bytes, /) -> None: ...


def update_digest(hasher: Hasher, value: Any) -> None:
    """Feed the canonical byte form of ``value`` into ``hasher``.

    Args:
        hasher: Running hash context (e.g. ``hashlib.sha1()``).
        value: JSON-shaped value: str, bool, int, float, None, list/tuple,
            set/frozenset, mapping, or a pydantic model.

    Raises:
        TypeError: If ``value`` (or a nested value) has no canonical form.
    """
    if isinstance(value, str):
        hasher.update(b'"')
        hasher.update(value.encode("utf-8"))
        hasher.update(b'"')
        return

    # bool before int: bool is an int subclass.
    if isinstance(value, (bool, int, float)):
        hasher.update(_scalar_text(value).encode("utf-8"))
        return

    if value is None:
        hasher.update(b"null")
        return

    if isinstance(value, BaseModel):
        update_digest(hasher, value.model_dump())
        return

    if isinstance(value, (list, tuple)):
        hasher.update(b"[")
        for item in value:
            update_digest(hasher, item)
            hasher.update(b",")
        hasher.update(b"]")
        return

    if isinstance(value, (set, frozenset)):
        # Sets have no order of their own; sort by canonical form.
        update_digest(hasher, sorted(value, key=canonical_digest))
        return

    if isinstance(value, Mapping):
        # Keys are emitted as text; the type breaks ties such as 1 vs "1".
        keys = sorted(value, key=lambda k: (str(k), type(k).__name__))
        hasher.update(b"{")
        for key in keys:
            item = value[key]
            update_digest(hasher, str(key))
            hasher.update(b": ")
            update_digest(hasher, item)
            hasher.update(b",")
        hasher.update(b"}")
        return

    raise TypeError(f"Cannot digest value of type {type(value).__name__!r}")


def canonical_digest(value: Any) -> str:
    """Return the SHA-1 hex digest of the canonical form of ``value``."""
    sha1 = hashlib.sha1()  # noqa: S324
    update_digest(sha1, value)
    return sha1.hexdigest()


def source_digest(source: str | bytes) -> str:
    """Plain SHA-1 over raw source bytes (str is encoded as UTF-8)."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    return hashlib.sha1(source).hexdigest()  # noqa: S324


def namespace_digest(identity: CompilerIdentity) -> str:
    """Digest of a compiler identity; names its cache subdirectory."""
    return canonical_digest(identity.payload())


def cache_key(identity: CompilerIdentity, source: str | bytes) -> CacheKey:
    return CacheKey(
        namespace_digest=namespace_digest(identity),
        source_digest=source_digest(source),
    )


def _scalar_text(value: bool | int | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Integral floats print like JSON numbers do: 1.0 -> "1".
    if value.is_integer():
        return str(int(value))
    return repr(value)
