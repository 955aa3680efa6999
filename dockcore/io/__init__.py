"""Grid cache persistence."""

from .cache_file import CACHE_FORMAT_VERSION, CacheArchive, CacheSnapshot

__all__ = ["CACHE_FORMAT_VERSION", "CacheArchive", "CacheSnapshot"]
