"""Readers for the source document store."""

from .base import BaseExtractor, Document
from .firestore_extractor import FirestoreExtractor
from .json_extractor import JSONExportExtractor

__all__ = [
    "BaseExtractor",
    "Document",
    "FirestoreExtractor",
    "JSONExportExtractor",
]
