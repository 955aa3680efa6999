"""Tests for the cache file format."""

import gzip
import hashlib
import pickle
import struct

import numpy as np
import pytest

from dockcore.errors import CacheFileError
from dockcore.io import CACHE_FORMAT_VERSION, CacheArchive, CacheSnapshot
from dockcore.io.cache_file import CACHE_MAGIC


@pytest.fixture
def snapshot():
    return CacheSnapshot(
        format_version=CACHE_FORMAT_VERSION,
        timestamp="2026-01-01T00:00:00",
        scoring_function_version="vina-1.2",
        dims=((0.0, 4.0, 4), (-1.0, 1.0, 2), (0.5, 2.0, 3)),
        atom_typing="xs",
        slope=1e6,
        grids={8: np.arange(60, dtype=np.float64).reshape(5, 3, 4)},
    )


class TestCacheArchive:
    """Test CacheArchive."""

    @pytest.mark.parametrize("compress", [True, False])
    def test_save_load(self, snapshot, tmp_path, compress):
        archive = CacheArchive(compress=compress)
        path = archive.save(snapshot, tmp_path / "cache.grid")
        loaded = archive.load(path)

        assert loaded.scoring_function_version == "vina-1.2"
        assert loaded.dims == snapshot.dims
        assert loaded.atom_typing == "xs"
        assert loaded.slope == 1e6
        assert list(loaded.grids) == [8]
        np.testing.assert_array_equal(loaded.grids[8], snapshot.grids[8])

    def test_compressed_file_is_gzip(self, snapshot, tmp_path):
        path = CacheArchive(compress=True).save(snapshot, tmp_path / "cache.grid")
        with gzip.open(path, "rb") as f:
            assert f.read(4) == CACHE_MAGIC

    def test_uncompressed_readable_by_default_archive(self, snapshot, tmp_path):
        path = CacheArchive(compress=False).save(snapshot, tmp_path / "cache.grid")
        assert path.read_bytes()[:4] == CACHE_MAGIC
        assert CacheArchive().load(path).dims == snapshot.dims

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CacheArchive().load(tmp_path / "nope.grid")

    def test_too_small(self, tmp_path):
        path = tmp_path / "small.grid"
        path.write_bytes(b"DKGC")
        with pytest.raises(CacheFileError, match="too small"):
            CacheArchive().load(path)

    def test_bad_magic(self, tmp_path):
        path = tmp_path / "bad.grid"
        path.write_bytes(b"XXXX" + bytes(64))
        with pytest.raises(CacheFileError, match="magic"):
            CacheArchive().load(path)

    def test_checksum(self, snapshot, tmp_path):
        path = CacheArchive(compress=False).save(snapshot, tmp_path / "cache.grid")
        data = bytearray(path.read_bytes())
        data[-1] ^= 0x01
        path.write_bytes(bytes(data))
        with pytest.raises(CacheFileError, match="checksum"):
            CacheArchive().load(path)

    def test_newer_format_rejected(self, tmp_path):
        payload = pickle.dumps({})
        path = tmp_path / "future.grid"
        path.write_bytes(
            CACHE_MAGIC
            + struct.pack("<I", CACHE_FORMAT_VERSION + 1)
            + hashlib.sha256(payload).digest()
            + payload
        )
        with pytest.raises(CacheFileError, match="not supported"):
            CacheArchive().load(path)
