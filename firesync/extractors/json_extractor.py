"""JSON export extractor."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .base import BaseExtractor, Document
from ..errors import SourceReadError

logger = logging.getLogger(__name__)

SUBCOLLECTIONS_KEY = "__collections__"


class JSONExportExtractor(BaseExtractor):
    """
    Extractor for a JSON export of a Firestore database.

    The export maps collection names to documents keyed by id. Subcollections
    sit under the reserved ``__collections__`` key of their parent document:

        {
          "forum": {
            "f1": {
              "title": "Hello",
              "__collections__": {"comments": {"c1": {"text": "Hi"}}}
            }
          }
        }

    A collection may also be a list of documents carrying their own ``id``.
    """

    def __init__(self, file_path: str, encoding: str = "utf-8"):
        """
        Initialize the JSON export extractor.

        Args:
            file_path: Path to the export file
            encoding: File encoding
        """
        super().__init__(Path(file_path).name)
        self.file_path = Path(file_path)
        self.encoding = encoding
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is None:
            try:
                with open(self.file_path, encoding=self.encoding) as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise SourceReadError(str(self.file_path), str(e)) from e

            if not isinstance(data, dict):
                raise SourceReadError(
                    str(self.file_path), "export must be an object keyed by collection"
                )
            logger.info(f"Loaded export {self.file_path} ({len(data)} collections)")
            self._data = data
        return self._data

    def list_documents(self, collection: str) -> Iterable[Document]:
        """List the documents of a top-level collection."""
        return self._documents(self._load().get(collection), collection)

    def list_subdocuments(
        self,
        collection: str,
        parent_id: str,
        subcollection: str
    ) -> Iterable[Document]:
        """List the documents of a subcollection under one parent document."""
        parent = self._find(self._load().get(collection), parent_id) or {}
        children = (parent.get(SUBCOLLECTIONS_KEY) or {}).get(subcollection)
        return self._documents(children, f"{collection}/{parent_id}/{subcollection}")

    def _find(self, node: Any, doc_id: str) -> Optional[Dict[str, Any]]:
        if isinstance(node, dict):
            doc = node.get(doc_id)
            return doc if isinstance(doc, dict) else None
        if isinstance(node, list):
            for doc in node:
                if isinstance(doc, dict) and str(doc.get("id")) == doc_id:
                    return doc
        return None

    def _documents(self, node: Any, path: str) -> Iterable[Document]:
        if node is None:
            return []

        if isinstance(node, dict):
            items = node.items()
        elif isinstance(node, list):
            items = []
            for position, doc in enumerate(node):
                if not isinstance(doc, dict) or "id" not in doc:
                    raise SourceReadError(path, f"document at position {position} has no id")
                items.append((doc["id"], doc))
        else:
            raise SourceReadError(path, f"unexpected {type(node).__name__} in export")

        documents = []
        for doc_id, doc in items:
            if doc is not None and not isinstance(doc, dict):
                raise SourceReadError(path, f"document '{doc_id}' is not an object")
            fields = {
                k: v for k, v in (doc or {}).items() if k != SUBCOLLECTIONS_KEY
            }
            documents.append((str(doc_id), fields))
        return documents
