"""Shared fixtures: in-memory source and destination."""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytest

from firesync.extractors.base import BaseExtractor, Document
from firesync.loaders.base import BaseLoader
from firesync.models.mapping import CollectionMapping, MappingRegistry, SubcollectionMapping


class FakeExtractor(BaseExtractor):
    """
    Source backed by plain dicts.

    ``collections`` maps collection name to {doc_id: fields}. ``subcollections``
    maps (collection, parent_id, name) to {doc_id: fields}.
    """

    def __init__(
        self,
        collections: Optional[Dict[str, Dict[str, Any]]] = None,
        subcollections: Optional[Dict[Tuple[str, str, str], Dict[str, Any]]] = None,
        failing: Iterable[str] = ()
    ):
        super().__init__("fake")
        self.collections = collections or {}
        self.subcollections = subcollections or {}
        self.failing = set(failing)
        self.calls: List[str] = []

    def list_documents(self, collection: str) -> Iterable[Document]:
        self.calls.append(collection)
        if collection in self.failing:
            raise RuntimeError(f"permission denied on {collection}")
        return list(self.collections.get(collection, {}).items())

    def list_subdocuments(self, collection: str, parent_id: str, subcollection: str) -> Iterable[Document]:
        path = f"{collection}/{parent_id}/{subcollection}"
        self.calls.append(path)
        if path in self.failing:
            raise RuntimeError(f"permission denied on {path}")
        return list(self.subcollections.get((collection, parent_id, subcollection), {}).items())


class RecordingLoader(BaseLoader):
    """
    Destination that records every upsert call.

    ``fail_batches_over`` rejects any call with more rows than the limit.
    ``bad_ids`` rejects any call containing one of those ids.
    ``fail_tables`` rejects every call to those tables.
    """

    def __init__(
        self,
        batch_size: int = 100,
        fail_batches_over: Optional[int] = None,
        bad_ids: Iterable[str] = (),
        fail_tables: Iterable[str] = ()
    ):
        super().__init__("recording", batch_size)
        self.fail_batches_over = fail_batches_over
        self.bad_ids: Set[str] = set(bad_ids)
        self.fail_tables: Set[str] = set(fail_tables)
        self.calls: List[Dict[str, Any]] = []
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def upsert_batch(self, table, rows, conflict_field="id", ignore_duplicates=True):
        self.calls.append({
            "table": table,
            "rows": rows,
            "conflict_field": conflict_field,
            "ignore_duplicates": ignore_duplicates,
        })
        if table in self.fail_tables:
            raise RuntimeError(f"relation {table} does not exist")
        if self.fail_batches_over is not None and len(rows) > self.fail_batches_over:
            raise RuntimeError("payload too large")
        for row in rows:
            if row.get("id") in self.bad_ids:
                raise RuntimeError(f"invalid row {row['id']}")

        stored = self.tables.setdefault(table, {})
        for row in rows:
            key = row.get(conflict_field)
            if key in stored and ignore_duplicates:
                continue
            stored[key] = row

    def calls_for(self, table: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["table"] == table]


@pytest.fixture
def forum_registry() -> MappingRegistry:
    return MappingRegistry([
        CollectionMapping(collection="users", table="users"),
        CollectionMapping(
            collection="forum",
            table="forum",
            subcollections=(
                SubcollectionMapping(name="comments", table="forum_comments", foreign_key="forumId"),
            ),
        ),
        CollectionMapping(collection="videos", table="videos"),
    ])


@pytest.fixture
def forum_source() -> FakeExtractor:
    return FakeExtractor(
        collections={
            "users": {"u1": {"name": "Ada"}, "u2": {"name": "Grace"}},
            "forum": {"f1": {"title": "Welcome"}, "f2": {"title": "Rules"}},
        },
        subcollections={
            ("forum", "f1", "comments"): {
                "c1": {"text": "Hi"},
                "c2": {"text": "Hello", "forumId": "stale"},
            },
            ("forum", "f2", "comments"): {"c3": {"text": "Noted"}},
        },
    )
