# src/cache/base_cache_store.py — v1
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from compilecache.cache.models import CompilerIdentity


class BaseCacheStore(ABC):
    """Unified interface for compiled-output storage backends."""

    @abstractmethod
    def namespace_path(self, identity: CompilerIdentity) -> Path:
        """Directory holding every entry produced by one compiler identity."""

    @abstractmethod
    def entry_path(self, namespace: Path, source: str | bytes) -> Path:
        """Location of the entry for ``source`` inside ``namespace``."""

    @abstractmethod
    def read(self, path: Path) -> str | None:
        """Return cached text, or None on any failure."""

    @abstractmethod
    def write(self, path: Path, text: str) -> None:
        """Persist compiled text. Failures propagate."""
