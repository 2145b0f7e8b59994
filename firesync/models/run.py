"""Sync run models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

# Entry aborted before any writes.
FATAL_ERRORS = -1


class SyncMode(str, Enum):
    """How records are written to the destination."""
    DRY_RUN = "dry_run"  # Read everything, write nothing
    UPSERT = "upsert"  # Insert new rows, leave existing ids untouched
    FORCE = "force"  # Overwrite existing rows on id conflict

    @classmethod
    def from_flags(cls, dry_run: bool = False, force: bool = False) -> "SyncMode":
        """Resolve the mode from CLI flags. Dry run takes precedence."""
        if dry_run:
            return cls.DRY_RUN
        if force:
            return cls.FORCE
        return cls.UPSERT

    @property
    def label(self) -> str:
        return {
            SyncMode.DRY_RUN: "DRY RUN",
            SyncMode.UPSERT: "UPSERT",
            SyncMode.FORCE: "FORCE",
        }[self]


@dataclass
class SubcollectionResult:
    """Outcome of syncing one subcollection mapping across all parents."""
    name: str
    table: str
    synced: int = 0
    errors: int = 0
    failures: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "table": self.table,
            "synced": self.synced,
            "errors": self.errors,
            "failures": self.failures,
        }


@dataclass
class SyncResult:
    """Outcome of syncing one mapping entry."""
    collection: str
    table: str
    synced: int = 0
    errors: int = 0
    subcollections: List[SubcollectionResult] = field(default_factory=list)
    failures: List[Dict[str, Any]] = field(default_factory=list)
    error_message: Optional[str] = None

    @classmethod
    def fatal(cls, collection: str, table: str, message: str) -> "SyncResult":
        """Build the result for an entry that aborted before writing."""
        return cls(
            collection=collection,
            table=table,
            synced=0,
            errors=FATAL_ERRORS,
            error_message=message,
        )

    @property
    def is_fatal(self) -> bool:
        return self.errors == FATAL_ERRORS

    @property
    def total_synced(self) -> int:
        """Records synced by this entry and its subcollections."""
        return self.synced + sum(s.synced for s in self.subcollections)

    @property
    def total_errors(self) -> int:
        """Non-negative error count of this entry and its subcollections."""
        return max(0, self.errors) + sum(max(0, s.errors) for s in self.subcollections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "collection": self.collection,
            "table": self.table,
            "synced": self.synced,
            "errors": self.errors,
            "error_message": self.error_message,
            "failures": self.failures,
            "subcollections": [s.to_dict() for s in self.subcollections],
        }


@dataclass
class SyncRun:
    """A complete sync run and its per-entry results."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    mode: SyncMode = SyncMode.UPSERT
    collection_filter: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    results: List[SyncResult] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_result(self, result: SyncResult) -> None:
        """Append the result of a fully processed entry."""
        self.results.append(result)

    @property
    def dry_run(self) -> bool:
        return self.mode == SyncMode.DRY_RUN

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def total_synced(self) -> int:
        return sum(r.total_synced for r in self.results)

    @property
    def total_errors(self) -> int:
        return sum(r.total_errors for r in self.results)

    @property
    def fatal_collections(self) -> List[str]:
        return [r.collection for r in self.results if r.is_fatal]

    @property
    def succeeded(self) -> bool:
        return self.total_errors == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "mode": self.mode.value,
            "collection_filter": self.collection_filter,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "results": [r.to_dict() for r in self.results],
            "total_synced": self.total_synced,
            "total_errors": self.total_errors,
            "fatal_collections": self.fatal_collections,
            "metadata": self.metadata,
        }
