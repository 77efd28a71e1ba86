# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a fake compiler backend and sample sources. No real compiler is
loaded; the fake records every call it receives.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from compilecache.compiler.base_compiler import BaseCompiler
from compilecache.logging.context import clear_context


class FakeCompiler(BaseCompiler):
    """Upper-cases its input and records every call."""

    def __init__(
        self,
        identity: dict[str, Any] | None = None,
        version: str = "1.2.3",
        fail_with: Exception | None = None,
    ) -> None:
        self.identity = (
            identity if identity is not None
            else {"extensions": ["coffee", "litcoffee"], "name": "fake"}
        )
        self.version = version
        self.fail_with = fail_with
        self.initialize_calls = 0
        self.compile_calls: list[tuple[str, Path, Path | None]] = []

    def get_identity(self) -> dict[str, Any]:
        return self.identity

    def initialize(self) -> str:
        self.initialize_calls += 1
        return self.version

    def compile(self, source_text: str, path: Path, cache_path: Path | None) -> str:
        self.compile_calls.append((source_text, path, cache_path))
        if self.fail_with is not None:
            raise self.fail_with
        return f"// compiled\n{source_text.upper()}"

    def mime_type(self) -> str:
        return "text/javascript"


# === FIXTURES: Sample data ===


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def plain_source() -> str:
    """Short, readable source that should always be compiled."""
    return "square = (x) -> x * x\nconsole.log square 4\n"


@pytest.fixture
def source_file(tmp_path: Path, plain_source: str) -> Path:
    path = tmp_path / "app" / "main.coffee"
    path.parent.mkdir(parents=True)
    path.write_text(plain_source, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_log_context():
    yield
    clear_context()


@pytest.fixture
def make_compiler() -> type[FakeCompiler]:
    """Factory for FakeCompiler with custom identity/version/failure."""
    return FakeCompiler
