# src/compiler/base_compiler.py — v1
"""Abstract compiler backend interface.

Backends are expensive to load, so ``initialize`` is only called once a file
actually needs compiling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BaseCompiler(ABC):
    """Capabilities every compiler backend must provide."""

    @abstractmethod
    def get_identity(self) -> dict[str, Any]:
        """Describe the backend.

        Must contain ``extension`` (str) or ``extensions`` (list of str);
        every other key is free-form metadata that feeds the cache namespace.
        """

    @abstractmethod
    def initialize(self) -> str:
        """Load the backend and return its version identifier."""

    @abstractmethod
    def compile(self, source_text: str, path: Path, cache_path: Path | None) -> str:
        """Compile ``source_text`` read from ``path``.

        ``cache_path`` is where the result will be stored, or None when
        caching is disabled.
        """

    @abstractmethod
    def mime_type(self) -> str:
        """MIME type of the compiled output (descriptive only)."""
