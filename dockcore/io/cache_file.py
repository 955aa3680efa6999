"""On-disk format for populated grid caches."""

from __future__ import annotations

import gzip
import hashlib
import logging
import pickle
import struct
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from ..errors import CacheFileError

if TYPE_CHECKING:
    from ..scoring.cache import GridCache

logger = logging.getLogger(__name__)

# Cache file format version for compatibility checking
CACHE_FORMAT_VERSION = 1
CACHE_MAGIC = b"DKGC"  # Magic bytes for file identification
_HEADER_SIZE = 4 + 4 + 32


@dataclass
class CacheSnapshot:
    """
    Serializable contents of a grid cache.

    Attributes:
        format_version: Cache file format version.
        timestamp: When the snapshot was taken.
        scoring_function_version: Version tag of the scoring function.
        dims: Lattice (begin, end, n) per axis.
        atom_typing: Value of the AtomTyping scheme.
        slope: Out-of-bounds slope of the cache (informational).
        grids: Lattice values of every populated atom type.
    """

    format_version: int
    timestamp: str
    scoring_function_version: str
    dims: tuple[tuple[float, float, int], ...]
    atom_typing: str
    slope: float
    grids: dict[int, NDArray[np.floating]] = field(default_factory=dict)

    @classmethod
    def from_cache(cls, cache: GridCache) -> CacheSnapshot:
        """
        Capture the populated grids of a cache.

        Args:
            cache: Grid cache.

        Returns:
            New CacheSnapshot instance.
        """
        return cls(
            format_version=CACHE_FORMAT_VERSION,
            timestamp=datetime.now().isoformat(),
            scoring_function_version=cache.scoring_function_version,
            dims=cache.dims.to_tuple(),
            atom_typing=cache.atom_typing.value,
            slope=cache.slope,
            grids={t: cache.grids[t].data.copy() for t in cache.populated_types},
        )


class CacheArchive:
    """
    Reader/writer for cache snapshot files.

    Layout: magic, format version (little-endian uint32), SHA-256 of the
    payload, pickled payload. The whole file is optionally gzip compressed.

    Example:
        archive = CacheArchive()
        archive.save(CacheSnapshot.from_cache(cache), "receptor.grid")
        snapshot = archive.load("receptor.grid")
    """

    def __init__(self, compress: bool = True) -> None:
        """
        Initialize archive.

        Args:
            compress: Whether to gzip compress written files.
        """
        self.compress = compress

    def save(self, snapshot: CacheSnapshot, path: str | Path) -> Path:
        """
        Write a snapshot to ``path``.

        Args:
            snapshot: Snapshot to save.
            path: Output file.

        Returns:
            Path written.
        """
        path = Path(path)
        data = self._serialize(snapshot)
        checksum = hashlib.sha256(data).digest()

        open_func = gzip.open if self.compress else open
        with open_func(path, "wb") as f:
            f.write(CACHE_MAGIC)
            f.write(struct.pack("<I", CACHE_FORMAT_VERSION))
            f.write(checksum)
            f.write(data)

        logger.debug("Wrote %d grids to %s", len(snapshot.grids), path)
        return path

    def load(self, path: str | Path) -> CacheSnapshot:
        """
        Read a snapshot from ``path``.

        Args:
            path: Input file, compressed or not.

        Returns:
            Loaded CacheSnapshot.

        Raises:
            CacheFileError: If the file is invalid or corrupted.
            FileNotFoundError: If the file doesn't exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Cache file not found: {path}")

        try:
            with gzip.open(path, "rb") as f:
                content = f.read()
        except gzip.BadGzipFile:
            with open(path, "rb") as f:
                content = f.read()

        if len(content) < _HEADER_SIZE:
            raise CacheFileError("Invalid cache file (too small)")
        if content[:4] != CACHE_MAGIC:
            raise CacheFileError("Invalid cache file (bad magic)")

        version = struct.unpack("<I", content[4:8])[0]
        stored_checksum = content[8:_HEADER_SIZE]
        data = content[_HEADER_SIZE:]

        if hashlib.sha256(data).digest() != stored_checksum:
            raise CacheFileError("Cache file corrupted (checksum mismatch)")
        if version > CACHE_FORMAT_VERSION:
            raise CacheFileError(
                f"Cache format version {version} not supported "
                f"(max supported: {CACHE_FORMAT_VERSION})"
            )

        return self._deserialize(data)

    def _serialize(self, snapshot: CacheSnapshot) -> bytes:
        data: dict[str, Any] = {
            "format_version": snapshot.format_version,
            "timestamp": snapshot.timestamp,
            "scoring_function_version": snapshot.scoring_function_version,
            "dims": [list(axis) for axis in snapshot.dims],
            "atom_typing": snapshot.atom_typing,
            "slope": snapshot.slope,
            "grids": snapshot.grids,
        }
        return pickle.dumps(data, protocol=pickle.HIGHEST_PROTOCOL)

    def _deserialize(self, data: bytes) -> CacheSnapshot:
        loaded = pickle.loads(data)
        return CacheSnapshot(
            format_version=loaded["format_version"],
            timestamp=loaded["timestamp"],
            scoring_function_version=loaded["scoring_function_version"],
            dims=tuple(
                (float(b), float(e), int(n)) for b, e, n in loaded["dims"]
            ),
            atom_typing=loaded["atom_typing"],
            slope=loaded.get("slope", 0.0),
            grids={
                int(t): np.asarray(values, dtype=np.float64)
                for t, values in loaded["grids"].items()
            },
        )
