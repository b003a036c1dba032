class GeocoinError(Exception):
    """Base error for geocoin domain exceptions."""


class CacheAlreadyGenerated(GeocoinError):
    """Raised when generating coins for a cell that was already generated."""


class ConfigError(GeocoinError):
    """Raised when the gameplay configuration cannot be loaded or is out of range."""


class SnapshotError(GeocoinError):
    """Base exception for save/restore errors."""


class SnapshotValidationError(SnapshotError, ValueError):
    """Raised when a serialized world or cache state is malformed."""
