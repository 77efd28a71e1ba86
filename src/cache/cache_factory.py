# src/cache/cache_factory.py — v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path

from compilecache.cache.base_cache_store import BaseCacheStore
from compilecache.config.settings import Settings


def create_cache_store(
    settings: Settings | None = None,
    cache_root: Path | str | None = None,
) -> BaseCacheStore | None:
    """Instantiate the file cache store, or None when caching is disabled.

    Args:
        settings: Application settings. Ignored when ``cache_root`` is given.
        cache_root: Explicit root directory.

    Returns:
        Configured BaseCacheStore, or None if there is nothing to cache into.
    """
    from compilecache.cache.file_store import FileCacheStore

    if cache_root is not None:
        return FileCacheStore(cache_root=cache_root)

    if settings is None or settings.effective_cache_root is None:
        return None

    return FileCacheStore(cache_root=settings.effective_cache_root)
