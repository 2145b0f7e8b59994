"""Exception hierarchy for the sync tool."""

from typing import Any, Dict, List, Optional


class FiresyncError(Exception):
    """Base exception for all sync failures."""


class ConfigurationError(FiresyncError):
    """Raised for invalid run configuration. Fatal before any I/O."""


class UnknownCollectionError(ConfigurationError):
    """Raised when a collection filter matches no mapping entry."""

    def __init__(self, collection: str, available: Optional[List[str]] = None):
        self.collection = collection
        self.available = available or []
        message = f"Collection '{collection}' not found in mapping"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class MappingError(ConfigurationError):
    """Raised when a collection mapping violates the registry invariants."""


class SourceReadError(FiresyncError):
    """Raised by source stores when a collection cannot be read."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Error reading '{path}': {message}")


class DestinationError(FiresyncError):
    """Raised by destinations when an upsert call is rejected."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.table = table
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)
