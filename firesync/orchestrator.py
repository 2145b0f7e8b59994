"""Sync orchestrator - coordinates the complete Firestore to Supabase sync."""

import logging
from datetime import datetime
from typing import List, Optional

from .extractors.base import BaseExtractor
from .loaders.base import BaseLoader
from .models.mapping import CollectionMapping, MappingRegistry, SubcollectionMapping
from .models.record import SourceRecord
from .models.run import SubcollectionResult, SyncMode, SyncResult, SyncRun

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Orchestrates a sync run.

    Walks the registry in order and, for each entry, reads the collection,
    writes it to its table, then reads and writes every subcollection. A
    failure inside one entry is recorded for that entry and the run moves on.
    """

    def __init__(
        self,
        extractor: BaseExtractor,
        loader: BaseLoader,
        registry: MappingRegistry
    ):
        """
        Initialize the orchestrator.

        Args:
            extractor: Source reader
            loader: Destination writer
            registry: Collections to sync
        """
        self.extractor = extractor
        self.loader = loader
        self.registry = registry
        self.last_run: Optional[SyncRun] = None

    def run(
        self,
        mode: SyncMode = SyncMode.UPSERT,
        collection: Optional[str] = None
    ) -> SyncRun:
        """
        Run the sync.

        Args:
            mode: Write mode
            collection: Restrict the run to a single collection

        Returns:
            SyncRun with one result per processed entry

        Raises:
            UnknownCollectionError: If ``collection`` is not in the registry.
                Raised before any read or write.
        """
        entries = self.registry.select(collection)

        run = SyncRun(mode=mode, collection_filter=collection)
        run.started_at = datetime.utcnow()
        self.extractor.reset()

        logger.info(
            f"Starting sync of {len(entries)} collection(s) in {mode.label} mode"
        )

        for entry in entries:
            try:
                result = self._sync_entry(entry, mode)
            except Exception as e:
                logger.error(f"Sync of {entry.collection} aborted: {e}")
                result = SyncResult.fatal(entry.collection, entry.table, str(e))
            run.add_result(result)

        run.completed_at = datetime.utcnow()
        if self.extractor.errors:
            run.metadata["source_errors"] = self.extractor.errors

        logger.info(
            f"Sync finished: {run.total_synced} synced, "
            f"{run.total_errors} errors"
        )
        self.last_run = run
        return run

    def _sync_entry(self, entry: CollectionMapping, mode: SyncMode) -> SyncResult:
        logger.info(f"Syncing {entry.collection} -> {entry.table}")

        parents = self.extractor.read_collection(entry.collection)
        if not parents:
            logger.info(f"{entry.collection}: no documents, skipping")
            return SyncResult(collection=entry.collection, table=entry.table)

        logger.info(f"{entry.collection}: read {len(parents)} documents")
        written = self.loader.write(entry.table, parents, mode, entry.conflict_field)
        result = SyncResult(
            collection=entry.collection,
            table=entry.table,
            synced=written.success_count,
            errors=written.error_count,
            failures=written.errors,
        )

        for sub in entry.subcollections:
            result.subcollections.append(
                self._sync_subcollection(entry, sub, parents, mode)
            )

        return result

    def _sync_subcollection(
        self,
        entry: CollectionMapping,
        sub: SubcollectionMapping,
        parents: List[SourceRecord],
        mode: SyncMode
    ) -> SubcollectionResult:
        children: List[SourceRecord] = []
        for parent in parents:
            for child in self.extractor.read_subcollection(entry.collection, parent.id, sub.name):
                children.append(child.with_field(sub.foreign_key, parent.id))

        logger.info(
            f"{entry.collection}/{sub.name}: read {len(children)} documents "
            f"across {len(parents)} parents"
        )
        written = self.loader.write(sub.table, children, mode, sub.conflict_field)
        return SubcollectionResult(
            name=sub.name,
            table=sub.table,
            synced=written.success_count,
            errors=written.error_count,
            failures=written.errors,
        )
