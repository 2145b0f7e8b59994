"""Data models for the sync tool."""

from .mapping import (
    SubcollectionMapping,
    CollectionMapping,
    MappingRegistry,
)
from .record import (
    ID_FIELD,
    SourceRecord,
    WriteResult,
)
from .run import (
    FATAL_ERRORS,
    SyncMode,
    SubcollectionResult,
    SyncResult,
    SyncRun,
)

__all__ = [
    "SubcollectionMapping",
    "CollectionMapping",
    "MappingRegistry",
    "ID_FIELD",
    "SourceRecord",
    "WriteResult",
    "FATAL_ERRORS",
    "SyncMode",
    "SubcollectionResult",
    "SyncResult",
    "SyncRun",
]
