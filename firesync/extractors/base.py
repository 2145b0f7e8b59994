"""Base extractor interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import logging

from ..errors import SourceReadError
from ..models.record import SourceRecord
from ..services.normalizer import normalize_record

logger = logging.getLogger(__name__)

# (document id, document body). The body may be None for empty documents.
Document = Tuple[str, Optional[Dict[str, Any]]]


class BaseExtractor(ABC):
    """
    Base class for document store readers.

    Concrete extractors only list raw documents. This class turns them into
    normalized SourceRecord objects and applies the collection-isolated failure
    policy: a collection that cannot be read is logged and yields no records,
    it never aborts the reads of other collections.
    """

    def __init__(self, name: str):
        """
        Initialize the extractor.

        Args:
            name: Human-readable name of the source (e.g. the project id)
        """
        self.name = name
        self._errors: List[Dict[str, Any]] = []

    @abstractmethod
    def list_documents(self, collection: str) -> Iterable[Document]:
        """
        List the documents of a top-level collection.

        A missing or empty collection yields nothing. Read failures raise.
        """
        pass

    @abstractmethod
    def list_subdocuments(
        self,
        collection: str,
        parent_id: str,
        subcollection: str
    ) -> Iterable[Document]:
        """
        List the documents of ``collection/parent_id/subcollection``.

        A missing or empty subcollection yields nothing. Read failures raise.
        """
        pass

    def read_collection(self, collection: str) -> List[SourceRecord]:
        """
        Read every document of a collection as normalized records.

        Args:
            collection: Source collection name

        Returns:
            List of records, empty if the collection is empty or unreadable
        """
        return self._read(collection, lambda: self.list_documents(collection))

    def read_subcollection(
        self,
        parent_collection: str,
        parent_id: str,
        subcollection: str
    ) -> List[SourceRecord]:
        """
        Read every document of a parent-scoped subcollection.

        Args:
            parent_collection: Collection of the parent document
            parent_id: Id of the parent document
            subcollection: Subcollection name

        Returns:
            List of records, empty if the subcollection is empty or unreadable
        """
        path = f"{parent_collection}/{parent_id}/{subcollection}"
        return self._read(
            path,
            lambda: self.list_subdocuments(parent_collection, parent_id, subcollection),
        )

    def _read(self, path: str, fetch: Callable[[], Iterable[Document]]) -> List[SourceRecord]:
        try:
            return [self.create_record(doc_id, fields, path) for doc_id, fields in fetch()]
        except SourceReadError as e:
            self.add_error(str(e), path=path)
            return []
        except Exception as e:
            self.add_error(f"Error reading '{path}': {e}", path=path)
            return []

    def create_record(
        self,
        id: str,
        fields: Optional[Dict[str, Any]],
        collection: str
    ) -> SourceRecord:
        """Create a normalized SourceRecord from a raw document."""
        return SourceRecord(
            id=str(id),
            collection=collection,
            data=normalize_record(fields),
        )

    def add_error(self, message: str, path: Optional[str] = None) -> None:
        """Record a read error."""
        self._errors.append({
            "message": message,
            "path": path,
            "timestamp": datetime.utcnow().isoformat(),
        })
        logger.error(message)

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return list(self._errors)

    def reset(self) -> None:
        """Reset the extractor state."""
        self._errors = []
