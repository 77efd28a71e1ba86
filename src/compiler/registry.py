# src/compiler/registry.py — v1
"""Extension handler registry owned by the host loader.

A handler takes ``(module_context, path)`` and returns whatever the host's
executor returns. Nothing here is global; the host creates a registry and
passes it to ``CompileCache.register``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import Any

LoaderHandler = Callable[[Any, "str | Path"], Any]
ModuleExecutor = Callable[[Any, str, "str | Path"], Any]


def _normalize_key(extension: str) -> str:
    ext = extension.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def execute_in_module(module: ModuleType, text: str, path: str | Path) -> ModuleType:
    """Run compiled Python ``text`` inside ``module``'s namespace."""
    filename = str(path)
    module.__file__ = filename
    code = compile(text, filename, "exec")
    exec(code, module.__dict__)  # noqa: S102
    return module


class ExtensionHandlerRegistry:
    """Maps dotted file extensions to loader handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, LoaderHandler] = {}

    def register(self, extension: str, handler: LoaderHandler) -> None:
        """Bind ``handler`` to ``extension``, replacing any previous one."""
        self._handlers[_normalize_key(extension)] = handler

    def get(self, extension: str) -> LoaderHandler | None:
        return self._handlers.get(_normalize_key(extension))

    def handler_for(self, path: str | Path) -> LoaderHandler | None:
        """Return the handler of the longest extension ``path`` ends with."""
        lower_path = str(path).lower()
        for ext in sorted(self._handlers, key=len, reverse=True):
            if lower_path.endswith(ext):
                return self._handlers[ext]
        return None

    def extensions(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and _normalize_key(extension) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
