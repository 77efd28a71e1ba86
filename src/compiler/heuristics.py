# src/compiler/heuristics.py — v1
"""Decide whether a source file should be compiled at all.

Checks run in order and stop at the first match:
vendored directory -> trailing source map -> minified -> extension.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

# Third-party or packaged code is never recompiled.
VENDORED_PATH_PATTERN = re.compile(
    r"[\\/](?:(?i:node_modules|site-packages|dist-packages)[\\/]|atom\.asar)"
)

SOURCE_MAP_MARKER = "//# sourceMap"

# Only the head of the file is measured, newlines are counted everywhere.
MINIFIED_SAMPLE_CHARS = 1024
MINIFIED_LINE_LENGTH = 80

GZIP_HEADER_SIZE = 10
GZIP_MAGIC = (0x1F, 0x8B)
GZIP_DEFLATE = 0x08


def is_gzipped(data: bytes) -> bool:
    """True if ``data`` starts with a gzip header using deflate.

    Both magic bytes must match; a single matching byte is not enough.
    """
    if len(data) < GZIP_HEADER_SIZE:
        return False
    if data[0] != GZIP_MAGIC[0] or data[1] != GZIP_MAGIC[1]:
        return False
    return data[2] == GZIP_DEFLATE


def is_minified(source: str) -> bool:
    """Guess from average line length whether ``source`` is minified."""
    length = min(len(source), MINIFIED_SAMPLE_CHARS)
    newline_count = source.count("\n")

    # No newlines: anything beyond a very short file counts as minified.
    if newline_count == 0:
        return length > MINIFIED_LINE_LENGTH

    return length / newline_count > MINIFIED_LINE_LENGTH


def has_trailing_source_map(source: str) -> bool:
    """True if a source map marker sits on the final line of ``source``."""
    return source.rfind(SOURCE_MAP_MARKER) > source.rfind("\n")


def is_vendored(
    path: str | Path, skip_pattern: re.Pattern[str] = VENDORED_PATH_PATTERN
) -> bool:
    return skip_pattern.search(str(path)) is not None


def matches_extension(path: str | Path, extensions: Iterable[str]) -> bool:
    """True if the lowercased path ends with ``.ext`` for any extension."""
    lower_path = str(path).lower()
    return any(lower_path.endswith(f".{ext.lstrip('.').lower()}") for ext in extensions)


def should_compile(
    path: str | Path,
    extensions: Iterable[str],
    source_text: str | None = None,
    skip_pattern: re.Pattern[str] = VENDORED_PATH_PATTERN,
) -> bool:
    """Decide whether ``path`` should go through the compiler.

    Args:
        path: Absolute path of the source file.
        extensions: Registered extensions, with or without a leading dot.
        source_text: File contents, when already loaded. Content checks are
            skipped when it is None or empty.
        skip_pattern: Paths matching this are never compiled. Defaults to
            vendored and packaged directories.

    Returns:
        False for vendored paths, files ending in a source map comment,
        and minified files; otherwise whether the extension is registered.
    """
    if is_vendored(path, skip_pattern):
        return False

    if source_text and has_trailing_source_map(source_text):
        return False

    if source_text and is_minified(source_text):
        return False

    return matches_extension(path, extensions)
