"""Collection-to-table mapping models."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..errors import MappingError, UnknownCollectionError
from .record import ID_FIELD


@dataclass(frozen=True)
class SubcollectionMapping:
    """
    A nested subcollection written to its own table.

    Every child row carries ``foreign_key`` set to its parent's id. If a child
    document already has a field with that name, the parent id replaces it.
    """
    name: str
    table: str
    foreign_key: str
    conflict_field: str = ID_FIELD

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "name": self.name,
            "table": self.table,
            "foreign_key": self.foreign_key,
        }
        if self.conflict_field != ID_FIELD:
            result["conflict_field"] = self.conflict_field
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubcollectionMapping":
        """Create from dictionary representation."""
        if not isinstance(data, dict):
            raise MappingError(f"Subcollection mapping must be an object, got {data!r}")
        return cls(
            name=data.get("name", ""),
            table=data.get("table", ""),
            foreign_key=data.get("foreign_key", ""),
            conflict_field=data.get("conflict_field", ID_FIELD),
        )


@dataclass(frozen=True)
class CollectionMapping:
    """A top-level source collection and the table it is written to."""
    collection: str
    table: str
    subcollections: Tuple[SubcollectionMapping, ...] = field(default_factory=tuple)
    conflict_field: str = ID_FIELD
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {
            "collection": self.collection,
            "table": self.table,
        }
        if self.subcollections:
            result["subcollections"] = [s.to_dict() for s in self.subcollections]
        if self.conflict_field != ID_FIELD:
            result["conflict_field"] = self.conflict_field
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectionMapping":
        """Create from dictionary representation."""
        if not isinstance(data, dict):
            raise MappingError(f"Collection mapping must be an object, got {data!r}")
        subcollections = data.get("subcollections", [])
        if not isinstance(subcollections, list):
            raise MappingError(f"{data.get('collection')}: subcollections must be a list")
        return cls(
            collection=data.get("collection", ""),
            table=data.get("table", ""),
            subcollections=tuple(
                SubcollectionMapping.from_dict(s) for s in subcollections
            ),
            conflict_field=data.get("conflict_field", ID_FIELD),
            description=data.get("description", ""),
        )


class MappingRegistry:
    """
    Ordered, immutable set of collection mappings.

    The order of the entries is the order in which collections are synced.
    """

    def __init__(self, entries: List[CollectionMapping]):
        self._entries: Tuple[CollectionMapping, ...] = tuple(entries)
        errors = self.validate()
        if errors:
            raise MappingError("; ".join(errors))
        self._by_name = {e.collection: e for e in self._entries}

    def validate(self) -> List[str]:
        """
        Check the registry invariants.

        Returns:
            List of validation error messages
        """
        errors: List[str] = []
        seen = set()

        for i, entry in enumerate(self._entries, 1):
            label = entry.collection if _is_name(entry.collection) else f"entry #{i}"
            _check_name(errors, label, "source collection name", entry.collection)
            _check_name(errors, label, "destination table name", entry.table)
            _check_name(errors, label, "conflict field", entry.conflict_field)
            if _is_name(entry.collection):
                if entry.collection in seen:
                    errors.append(f"{label}: duplicate collection")
                seen.add(entry.collection)

            sub_names = set()
            for j, sub in enumerate(entry.subcollections, 1):
                sub_name = sub.name if _is_name(sub.name) else f"subcollection #{j}"
                sub_label = f"{label}/{sub_name}"
                _check_name(errors, sub_label, "subcollection name", sub.name)
                _check_name(errors, sub_label, "destination table name", sub.table)
                _check_name(errors, sub_label, "foreign key field", sub.foreign_key)
                _check_name(errors, sub_label, "conflict field", sub.conflict_field)
                if _is_name(sub.name):
                    if sub.name in sub_names:
                        errors.append(f"{sub_label}: duplicate subcollection")
                    sub_names.add(sub.name)

        return errors

    @property
    def entries(self) -> Tuple[CollectionMapping, ...]:
        return self._entries

    def __iter__(self) -> Iterator[CollectionMapping]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, collection: object) -> bool:
        return collection in self._by_name

    def get(self, collection: str) -> Optional[CollectionMapping]:
        """Get the mapping entry for a source collection."""
        return self._by_name.get(collection)

    def names(self) -> List[str]:
        """List source collection names in sync order."""
        return [e.collection for e in self._entries]

    def select(self, collection: Optional[str] = None) -> "MappingRegistry":
        """
        Restrict the registry to a single collection.

        Args:
            collection: Source collection name, or None to keep every entry

        Returns:
            A registry with the matching entry only

        Raises:
            UnknownCollectionError: If no entry matches
        """
        if collection is None:
            return self
        entry = self.get(collection)
        if entry is None:
            raise UnknownCollectionError(collection, self.names())
        return MappingRegistry([entry])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"collections": [e.to_dict() for e in self._entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MappingRegistry":
        """Create from dictionary representation."""
        entries = data.get("collections", [])
        if not isinstance(entries, list):
            raise MappingError("'collections' must be a list")
        return cls([CollectionMapping.from_dict(e) for e in entries])

    @classmethod
    def from_json_file(cls, filepath: str) -> "MappingRegistry":
        """Load a registry from a JSON file."""
        with open(filepath) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise MappingError(f"Invalid mapping file {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise MappingError(f"Invalid mapping file {filepath}: expected an object")
        return cls.from_dict(data)

    def to_json_file(self, filepath: str) -> None:
        """Save the registry to a JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _check_name(errors: List[str], label: str, what: str, value: Any) -> None:
    if not isinstance(value, str):
        errors.append(f"{label}: {what} must be a string, got {type(value).__name__}")
    elif not value:
        errors.append(f"{label}: {what} is required")
