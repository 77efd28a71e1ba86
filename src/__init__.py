"""Compile-result cache: skip heuristics, canonical digests and gzip file store."""

from compilecache.version import __version__

__all__ = ["__version__"]
