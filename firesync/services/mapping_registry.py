"""Registry of every Firestore collection known to the sync and its destination table."""

import logging
from pathlib import Path
from typing import Optional

from ..errors import MappingError
from ..models.mapping import (
    CollectionMapping,
    MappingRegistry,
    SubcollectionMapping,
)

logger = logging.getLogger(__name__)


DEFAULT_COLLECTIONS = [
    CollectionMapping(collection="users", table="users"),
    CollectionMapping(collection="consents", table="consents"),
    CollectionMapping(
        collection="forum",
        table="forum",
        subcollections=(
            SubcollectionMapping(
                name="comments",
                table="forum_comments",
                foreign_key="forumId",
            ),
        ),
    ),
    CollectionMapping(collection="carousel_items", table="carousel_items"),
    CollectionMapping(collection="learn", table="learn"),
    CollectionMapping(collection="videos", table="videos"),
    CollectionMapping(collection="resources", table="resources"),
    CollectionMapping(collection="recommendations", table="recommendations"),
    CollectionMapping(collection="notifications", table="notifications"),
    CollectionMapping(collection="settings", table="settings"),
    CollectionMapping(collection="quizzes", table="quizzes"),
    CollectionMapping(collection="quiz_questions", table="quiz_questions"),
]

DEFAULT_REGISTRY = MappingRegistry(DEFAULT_COLLECTIONS)


def load_registry(mapping_file: Optional[str] = None) -> MappingRegistry:
    """
    Load the collection registry.

    Args:
        mapping_file: Optional JSON file replacing the built-in registry

    Returns:
        MappingRegistry to sync

    Raises:
        MappingError: If the file is missing or violates the registry invariants
    """
    if not mapping_file:
        return DEFAULT_REGISTRY

    path = Path(mapping_file)
    if not path.exists():
        raise MappingError(f"Mapping file not found: {mapping_file}")

    registry = MappingRegistry.from_json_file(str(path))
    logger.info(f"Loaded {len(registry)} collection mappings from {path}")
    return registry
