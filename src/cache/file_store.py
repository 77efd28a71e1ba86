# src/cache/file_store.py — v1
"""Gzip file cache store.

Layout: ``{cache_root}/{namespace_digest}/{source_digest}``, no extension.
Entries are gzip-compressed UTF-8; raw UTF-8 entries written by older
tools are returned unchanged. Entries are never evicted.
"""

from __future__ import annotations

import gzip
import logging
import os
import re
import uuid
import zlib
from pathlib import Path

from compilecache.cache.base_cache_store import BaseCacheStore
from compilecache.cache.digest import namespace_digest, source_digest
from compilecache.cache.models import CompilerIdentity
from compilecache.compiler.heuristics import is_gzipped

logger = logging.getLogger(__name__)

# mkdir inside a packaged archive fails even when the directory exists.
READONLY_ARCHIVE_PATTERN = re.compile(
    r"[^\\/]+\.(?:asar|zip|pyz|egg|whl)(?:[\\/]|$)", re.IGNORECASE
)

# Permissions requested for new entries, before the process umask.
ENTRY_MODE = 0o666


def is_inside_archive(path: Path) -> bool:
    return READONLY_ARCHIVE_PATTERN.search(str(path)) is not None


class FileCacheStore(BaseCacheStore):
    """File-based cache store with gzip entries and atomic writes."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._namespace: Path | None = None

    @property
    def root(self) -> Path:
        return self._root

    def namespace_path(self, identity: CompilerIdentity) -> Path:
        """Return (and create once) the namespace directory for ``identity``.

        Memoized for the lifetime of the store: the first identity seen
        decides the namespace.
        """
        if self._namespace is not None:
            return self._namespace

        namespace = self._root / namespace_digest(identity)
        if is_inside_archive(namespace):
            logger.debug("Cache root %s is read-only; skipping mkdir", self._root)
        else:
            namespace.mkdir(parents=True, exist_ok=True)

        self._namespace = namespace
        return namespace

    def entry_path(self, namespace: Path, source: str | bytes) -> Path:
        return namespace / source_digest(source)

    def read(self, path: Path) -> str | None:
        """Read an entry, gunzipping when needed.

        Every failure is reported as None so callers treat it as a miss.
        """
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read cache entry %s: %s", path, e)
            return None

        try:
            if is_gzipped(data):
                data = gzip.decompress(data)
            return data.decode("utf-8")
        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
            logger.warning("Corrupt cache entry %s: %s", path, e)
            return None

    def write(self, path: Path, text: str) -> None:
        """Compress and atomically replace the entry at ``path``."""
        payload = gzip.compress(text.encode("utf-8"))
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        fd = os.open(tmp_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, ENTRY_MODE)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def exists(self, path: Path) -> bool:
        return path.is_file()
