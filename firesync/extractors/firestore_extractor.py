"""Firestore data extractor."""

import logging
from typing import Any, Iterable, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from .base import BaseExtractor, Document
from ..errors import ConfigurationError, SourceReadError

logger = logging.getLogger(__name__)


class FirestoreExtractor(BaseExtractor):
    """
    Extractor for a Firebase Firestore database.

    Documents are streamed collection by collection. Firestore returns an
    empty result for collections that do not exist, so "not found" and
    "empty" both yield no documents. API failures raise SourceReadError.
    """

    def __init__(self, client: Any, project_id: Optional[str] = None):
        """
        Initialize the Firestore extractor.

        Args:
            client: google.cloud.firestore.Client (or compatible)
            project_id: Firebase project id, for display
        """
        super().__init__(project_id or getattr(client, "project", None) or "firestore")
        self.project_id = project_id
        self._client = client

    @classmethod
    def from_service_account(cls, credentials_path: str) -> "FirestoreExtractor":
        """
        Build an extractor from a service account key file.

        Raises:
            ConfigurationError: If the key file is missing or invalid
        """
        try:
            cred = credentials.Certificate(credentials_path)
        except (IOError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot load Firebase service account '{credentials_path}': {e}"
            ) from e

        try:
            app = firebase_admin.get_app()
        except ValueError:
            app = firebase_admin.initialize_app(cred)

        logger.info(f"Connected to Firebase project {cred.project_id}")
        return cls(firestore.client(app), project_id=cred.project_id)

    def list_documents(self, collection: str) -> Iterable[Document]:
        """Stream the documents of a top-level collection."""
        query = self._client.collection(collection)
        return self._stream(query, collection)

    def list_subdocuments(
        self,
        collection: str,
        parent_id: str,
        subcollection: str
    ) -> Iterable[Document]:
        """Stream the documents of a subcollection under one parent document."""
        query = (
            self._client.collection(collection)
            .document(parent_id)
            .collection(subcollection)
        )
        return self._stream(query, f"{collection}/{parent_id}/{subcollection}")

    def _stream(self, query: Any, path: str) -> Iterable[Document]:
        try:
            for snapshot in query.stream():
                yield snapshot.id, snapshot.to_dict()
        except google_exceptions.NotFound:
            logger.debug(f"Nothing found at '{path}'")
        except google_exceptions.GoogleAPIError as e:
            raise SourceReadError(path, str(e)) from e
