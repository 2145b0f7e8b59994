"""Base loader interface for destination tables."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import logging

from ..errors import DestinationError
from ..models.record import ID_FIELD, SourceRecord, WriteResult
from ..models.run import SyncMode
from ..services.normalizer import sanitize_for_destination

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class BaseLoader(ABC):
    """
    Base class for destination loaders.

    Records are written in chunks of ``batch_size`` with one upsert call per
    chunk. When a chunk is rejected, each of its records is retried on its own
    so that a single bad row only costs itself.
    """

    def __init__(self, target_service: str, batch_size: int = DEFAULT_BATCH_SIZE):
        """
        Initialize the loader.

        Args:
            target_service: Name of the destination service
            batch_size: Number of records per upsert call
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.target_service = target_service
        self.batch_size = batch_size

    @abstractmethod
    def upsert_batch(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        conflict_field: str = ID_FIELD,
        ignore_duplicates: bool = True
    ) -> None:
        """
        Upsert rows into a table in a single call.

        Args:
            table: Destination table name
            rows: Rows to write
            conflict_field: Column whose collisions are treated as conflicts
            ignore_duplicates: Keep existing rows on conflict instead of
                overwriting them

        Raises:
            Exception: If the destination rejects the call
        """
        pass

    def write(
        self,
        table: str,
        records: List[SourceRecord],
        mode: SyncMode = SyncMode.UPSERT,
        conflict_field: str = ID_FIELD
    ) -> WriteResult:
        """
        Write records to a table.

        Never raises for destination failures: they are counted in the result.

        Args:
            table: Destination table name
            records: Records to write
            mode: Sync mode. DRY_RUN makes no destination calls
            conflict_field: Column used for conflict detection

        Returns:
            WriteResult with success and error counts
        """
        result = WriteResult(table=table)
        if not records:
            return result

        if mode == SyncMode.DRY_RUN:
            logger.info(f"[DRY RUN] Would write {len(records)} records to {table}")
            result.success_count = len(records)
            return result

        ignore_duplicates = mode != SyncMode.FORCE

        for i in range(0, len(records), self.batch_size):
            chunk = records[i:i + self.batch_size]
            rows = [sanitize_for_destination(r.to_row()) for r in chunk]
            result.batches += 1

            try:
                self.upsert_batch(table, rows, conflict_field, ignore_duplicates)
                result.success_count += len(chunk)
                logger.debug(f"Wrote batch {result.batches} ({len(chunk)} rows) to {table}")
            except Exception as e:
                # Batch failed - fall back to individual writes
                logger.warning(
                    f"Batch write to {table} failed, falling back to individual: {e}"
                )
                self._write_individually(table, chunk, rows, conflict_field,
                                         ignore_duplicates, result)

        logger.info(
            f"Wrote {result.success_count}/{len(records)} records to {table}"
            + (f" ({result.error_count} errors)" if result.error_count else "")
        )
        return result

    def _write_individually(
        self,
        table: str,
        chunk: List[SourceRecord],
        rows: List[Dict[str, Any]],
        conflict_field: str,
        ignore_duplicates: bool,
        result: WriteResult
    ) -> None:
        for record, row in zip(chunk, rows):
            try:
                self.upsert_batch(table, [row], conflict_field, ignore_duplicates)
                result.success_count += 1
            except Exception as e:
                logger.error(f"Failed to write {table}/{record.id}: {e}")
                result.record_failure(record.id, str(e))


class DryRunLoader(BaseLoader):
    """Loader used when no destination is configured. Only dry runs can use it."""

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        super().__init__("none", batch_size)

    def upsert_batch(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        conflict_field: str = ID_FIELD,
        ignore_duplicates: bool = True
    ) -> None:
        raise DestinationError("No destination configured", table=table)
