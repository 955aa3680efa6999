"""Exception types raised by dockcore."""


class DockCoreError(Exception):
    """Base class for dockcore errors."""


class CacheMismatchError(DockCoreError, ValueError):
    """A stored grid cache disagrees with the configured cache."""


class EnergyMismatchError(CacheMismatchError):
    """Stored scoring-function version differs from the configured one."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"scoring function version mismatch: expected {expected!r}, "
            f"cache has {found!r}"
        )


class GridDimsMismatchError(CacheMismatchError):
    """Stored grid dimensions differ from the configured ones."""

    def __init__(self, expected, found) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"grid dimensions mismatch: expected {expected}, cache has {found}"
        )


class AtomTypingMismatchError(CacheMismatchError):
    """Stored atom-typing scheme differs from the configured one."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"atom typing mismatch: expected {expected}, cache has {found}"
        )


class CacheFileError(DockCoreError, ValueError):
    """A cache file is truncated, corrupted or of an unsupported format."""
