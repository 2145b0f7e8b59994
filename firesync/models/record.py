"""Record models for sync data."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

ID_FIELD = "id"


@dataclass(frozen=True)
class SourceRecord:
    """A normalized document read from the source store."""
    id: str
    collection: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        """
        Build the destination row for this record.

        The document id always wins over a body field that happens to be
        named ``id``.
        """
        row = dict(self.data)
        row[ID_FIELD] = self.id
        return row

    def with_field(self, name: str, value: Any) -> "SourceRecord":
        """Return a copy of the record with ``name`` set to ``value``."""
        data = dict(self.data)
        data[name] = value
        return replace(self, data=data)


@dataclass
class WriteResult:
    """Result of writing a list of records to one destination table."""
    table: str
    success_count: int = 0
    error_count: int = 0
    batches: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def record_failure(self, record_id: Optional[str], error: str) -> None:
        """Count one failed record."""
        self.error_count += 1
        self.errors.append({"record_id": record_id, "error": error})
