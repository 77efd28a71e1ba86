# src/compiler/compile_cache.py — v1
"""Coordinates one compiler backend with the on-disk cache.

Per file: skip heuristics -> lazy backend init -> cache lookup -> compile on
miss -> store. Everything runs synchronously because host loaders need the
final text before they return.
"""

from __future__ import annotations

import functools
import logging
import os
import threading
from pathlib import Path

from compilecache.cache.base_cache_store import BaseCacheStore
from compilecache.cache.cache_factory import create_cache_store
from compilecache.cache.models import CacheStats, CompilerIdentity
from compilecache.compiler.base_compiler import BaseCompiler
from compilecache.compiler.heuristics import should_compile
from compilecache.compiler.registry import (
    ExtensionHandlerRegistry,
    ModuleExecutor,
    execute_in_module,
)
from compilecache.config.settings import Settings, load_settings
from compilecache.logging.context import source_context

logger = logging.getLogger(__name__)


class CompileCache:
    """Resolve source files to compiled text, caching results on disk."""

    def __init__(
        self,
        compiler: BaseCompiler,
        cache_root: Path | str | None = None,
    ) -> None:
        """Initialize with a backend and an optional cache root.

        Args:
            compiler: Backend that performs the actual compilation.
            cache_root: Directory for cache entries. None disables caching.
        """
        self._compiler = compiler
        self._identity: CompilerIdentity | None = None
        self._compiler_ready = False
        self._init_lock = threading.Lock()

        self._cache_root: Path | None = None
        self._store: BaseCacheStore | None = None
        self.set_cache_root(cache_root)

        self._stats = CacheStats()
        self._stats_lock = threading.Lock()
        self._seen_directories: set[Path] = set()

    @classmethod
    def from_settings(
        cls, compiler: BaseCompiler, settings: Settings | None = None
    ) -> CompileCache:
        """Build a CompileCache using CACHE_ROOT / CACHE_ENABLED settings."""
        settings = settings or load_settings()
        return cls(compiler, cache_root=settings.effective_cache_root)

    # --- Configuration ---

    def set_cache_root(self, cache_root: Path | str | None) -> None:
        """Point the cache at a new root, or disable it with None.

        A different root gets a fresh store, so the namespace directory is
        recomputed on next use.
        """
        if cache_root is None:
            self._cache_root = None
            self._store = None
            return

        root = Path(cache_root).expanduser()
        if self._store is not None and root == self._cache_root:
            return

        self._cache_root = root
        self._store = create_cache_store(cache_root=root)

    @property
    def cache_root(self) -> Path | None:
        return self._cache_root

    @property
    def cache_enabled(self) -> bool:
        return self._store is not None

    @property
    def stats(self) -> CacheStats:
        """Snapshot of hit/miss counters."""
        with self._stats_lock:
            return self._stats.model_copy()

    @property
    def seen_directories(self) -> set[Path]:
        return set(self._seen_directories)

    @property
    def mime_type(self) -> str:
        return self._compiler.mime_type()

    # --- Initialization ---

    def ensure_initialized(self) -> frozenset[str]:
        """Read the backend identity once and return its extensions.

        Raises:
            ConfigurationError: If the backend declares no extension.
        """
        return self._load_identity().extensions

    @property
    def extensions(self) -> frozenset[str]:
        return self.ensure_initialized()

    @property
    def identity(self) -> CompilerIdentity:
        return self._load_identity()

    def _load_identity(self) -> CompilerIdentity:
        identity = self._identity
        if identity is None:
            with self._init_lock:
                identity = self._identity
                if identity is None:
                    identity = CompilerIdentity.from_info(
                        self._compiler.get_identity()
                    )
                    self._identity = identity
        return identity

    def _ensure_compiler(self) -> CompilerIdentity:
        """Initialize the backend at most once and record its version."""
        # The flag is set only after the versioned identity is stored.
        if self._compiler_ready:
            return self._load_identity()

        unversioned = self._load_identity()
        with self._init_lock:
            if not self._compiler_ready:
                version = self._compiler.initialize()
                self._identity = unversioned.with_version(str(version))
                self._compiler_ready = True
                logger.info(
                    "Initialized %s (version %s)",
                    type(self._compiler).__name__, version,
                )
        return self._load_identity()

    # --- Resolution ---

    def should_compile_file(
        self, path: str | Path, source_text: str | None = None
    ) -> bool:
        return should_compile(path, self.ensure_initialized(), source_text)

    def resolve(self, path: str | Path, source_text: str | bytes | None = None) -> str:
        """Return the text the host should execute for ``path``.

        Args:
            path: Source file path, absolute or relative to the cwd.
            source_text: File contents if already loaded; read from disk
                (as UTF-8) when None.

        Returns:
            The source unchanged when it should not be compiled, otherwise
            the cached or freshly compiled text.

        Raises:
            ConfigurationError: If the backend declares no extension.
            OSError: If the source cannot be read or the entry cannot be written.
            Exception: Whatever the backend's compile raises.
        """
        self.ensure_initialized()

        full_path = Path(os.path.abspath(path))
        self._seen_directories.add(full_path.parent)

        if source_text is None:
            source_text = full_path.read_bytes().decode("utf-8")
        elif isinstance(source_text, bytes):
            source_text = source_text.decode("utf-8")

        with source_context(type(self._compiler).__name__, str(full_path)):
            return self._resolve(full_path, source_text)

    def _resolve(self, full_path: Path, source_text: str) -> str:
        if not self.should_compile_file(full_path, source_text):
            logger.debug("Skipping compilation of %s", full_path)
            return source_text

        identity = self._ensure_compiler()

        # Snapshot: set_cache_root may swap the store between read and write.
        store = self._store
        cache_path: Path | None = None
        if store is not None:
            namespace = store.namespace_path(identity)
            cache_path = store.entry_path(namespace, source_text)
            cached = store.read(cache_path)
            if cached is not None:
                self._record(hit=True)
                logger.debug(
                    "Cache hit for %s", full_path,
                    extra={"data": {"entry": str(cache_path)}},
                )
                return cached

        compiled = self._compiler.compile(source_text, full_path, cache_path)
        self._record(hit=False)
        logger.debug(
            "Cache miss for %s", full_path,
            extra={"data": {"entry": str(cache_path) if cache_path else None}},
        )

        if store is not None and cache_path is not None:
            store.write(cache_path, compiled)

        return compiled

    def _record(self, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._stats.hits += 1
            else:
                self._stats.misses += 1

    # --- Host loader integration ---

    def load_file(
        self,
        module_context: object,
        path: str | Path,
        executor: ModuleExecutor = execute_in_module,
    ) -> object:
        """Resolve ``path`` and run the result through the host executor."""
        text = self.resolve(path)
        return executor(module_context, text, path)

    def register(
        self,
        registry: ExtensionHandlerRegistry,
        executor: ModuleExecutor = execute_in_module,
    ) -> None:
        """Bind a loader handler for every extension into ``registry``."""
        for ext in sorted(self.ensure_initialized()):
            registry.register(ext, functools.partial(self.load_file, executor=executor))
