# src/logging/context.py — v1
"""Contextual logging support — attach compiler and source path to log records."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

# Set per backend and per resolved source file.
_compiler: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "compiler", default=None
)
_source_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source_path", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    compiler: str | None = None
    source_path: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(compiler=_compiler.get(), source_path=_source_path.get())


def set_compiler_context(compiler: str) -> None:
    _compiler.set(compiler)


def set_source_context(source_path: str | None) -> None:
    """Set the file currently being resolved (None clears it)."""
    _source_path.set(source_path)


@contextmanager
def source_context(compiler: str, source_path: str) -> Iterator[LogContext]:
    """Set compiler and source path for the block, then restore the previous values."""
    compiler_token = _compiler.set(compiler)
    source_token = _source_path.set(source_path)
    try:
        yield get_context()
    finally:
        _source_path.reset(source_token)
        _compiler.reset(compiler_token)


def clear_context() -> None:
    """Reset all context variables."""
    _compiler.set(None)
    _source_path.set(None)
