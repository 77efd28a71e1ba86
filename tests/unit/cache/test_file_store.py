# tests/unit/cache/test_file_store.py — v1
"""Tests for cache/file_store.py — gzip entries, legacy raw entries, namespaces."""

from __future__ import annotations

import gzip
import os
import stat
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from compilecache.cache.digest import canonical_digest, source_digest
from compilecache.cache.file_store import FileCacheStore, is_inside_archive
from compilecache.cache.models import CompilerIdentity


@pytest.fixture
def identity() -> CompilerIdentity:
    return CompilerIdentity(extensions=frozenset({"coffee"}), metadata={"version": "1"})


@pytest.fixture
def store(tmp_path) -> FileCacheStore:
    return FileCacheStore(cache_root=tmp_path / "cache")


class TestNamespacePath:
    def test_layout_and_creation(self, store, identity, tmp_path):
        ns = store.namespace_path(identity)
        assert ns == tmp_path / "cache" / canonical_digest(identity.payload())
        assert ns.is_dir()

    def test_memoized(self, store, identity):
        first = store.namespace_path(identity)
        other = identity.with_version("2")
        assert store.namespace_path(other) == first

    def test_existing_directory_tolerated(self, store, identity, tmp_path):
        existing = tmp_path / "cache" / canonical_digest(identity.payload())
        existing.mkdir(parents=True)
        assert store.namespace_path(identity) == existing

    def test_archive_root_skips_mkdir(self, tmp_path, identity):
        store = FileCacheStore(cache_root=tmp_path / "app.asar" / "cache")
        with patch.object(Path, "mkdir") as mkdir:
            ns = store.namespace_path(identity)
        mkdir.assert_not_called()
        assert not ns.exists()

    def test_mkdir_permission_error_propagates(self, store, identity):
        with patch.object(Path, "mkdir", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionError):
                store.namespace_path(identity)


class TestIsInsideArchive:
    def test_archives(self):
        assert is_inside_archive(Path("/opt/app/resources/app.asar/cache"))
        assert is_inside_archive(Path("/srv/tool.pyz/cache"))
        assert is_inside_archive(Path("/lib/pkg-1.0.egg"))

    def test_plain_directories(self):
        assert not is_inside_archive(Path("/home/user/.compilecache/cache"))
        assert not is_inside_archive(Path("/data/zipcodes/cache"))


class TestEntryPath:
    def test_named_by_source_digest(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "a = 1")
        assert path == ns / source_digest("a = 1")
        assert path.suffix == ""


class TestReadWrite:
    def test_round_trip_multibyte(self, store, identity):
        ns = store.namespace_path(identity)
        text = "console.log('héllo wörld ✓ 日本語')\n"
        path = store.entry_path(ns, text)
        store.write(path, text)
        assert store.read(path) == text

    def test_written_entry_is_gzip(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        store.write(path, "compiled")
        raw = path.read_bytes()
        assert raw[:2] == b"\x1f\x8b"
        assert gzip.decompress(raw) == b"compiled"

    def test_overwrite_same_key(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        store.write(path, "first")
        store.write(path, "second")
        assert store.read(path) == "second"

    def test_no_temp_files_left(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        store.write(path, "out")
        assert [p.name for p in ns.iterdir()] == [path.name]

    def test_legacy_raw_entry(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        path.write_bytes("var legacy = 'ü';".encode("utf-8"))
        assert store.read(path) == "var legacy = 'ü';"

    def test_missing_entry(self, store, identity):
        ns = store.namespace_path(identity)
        assert store.read(ns / "nope") is None

    def test_corrupt_gzip_is_miss(self, store, identity):
        ns = store.namespace_path(identity)
        path = ns / "corrupt"
        path.write_bytes(b"\x1f\x8b\x08" + b"\x00" * 7 + b"garbage")
        assert store.read(path) is None

    def test_read_permission_error_is_miss(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        store.write(path, "out")
        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            assert store.read(path) is None

    def test_write_failure_propagates(self, store, tmp_path):
        missing_dir = tmp_path / "does-not-exist" / "entry"
        with pytest.raises(OSError):
            store.write(missing_dir, "out")

    def test_failed_replace_cleans_temp(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        with patch("compilecache.cache.file_store.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError, match="boom"):
                store.write(path, "out")
        assert list(ns.iterdir()) == []

    def test_exists(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        assert not store.exists(path)
        store.write(path, "out")
        assert store.exists(path)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_entry_mode_follows_umask(self, store, identity):
        ns = store.namespace_path(identity)
        path = store.entry_path(ns, "x")
        previous = os.umask(0o022)
        try:
            store.write(path, "out")
            plain = ns / "plain.txt"
            plain.write_text("out")
        finally:
            os.umask(previous)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644
        assert stat.S_IMODE(path.stat().st_mode) == stat.S_IMODE(plain.stat().st_mode)
