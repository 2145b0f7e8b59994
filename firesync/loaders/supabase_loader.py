"""Supabase loader."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from .base import BaseLoader, DEFAULT_BATCH_SIZE
from ..errors import DestinationError
from ..models.record import ID_FIELD

logger = logging.getLogger(__name__)


class SupabaseLoader(BaseLoader):
    """
    Loader for Supabase tables.

    Each chunk is a single upsert through the Supabase client with an
    ``on_conflict`` target. ``ignore_duplicates`` keeps existing rows,
    otherwise they are overwritten.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = 30.0,
        client: Optional[Client] = None
    ):
        """
        Initialize the Supabase loader.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            service_key: Service role key
            batch_size: Number of records per upsert call
            timeout: Request timeout in seconds
            client: Optional pre-configured Supabase client
        """
        super().__init__("supabase", batch_size)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or create_client(
            self.base_url,
            service_key,
            options=ClientOptions(postgrest_client_timeout=timeout),
        )

    def upsert_batch(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        conflict_field: str = ID_FIELD,
        ignore_duplicates: bool = True
    ) -> None:
        """Upsert rows with one Supabase call."""
        if not rows:
            return

        try:
            (
                self._client.table(table)
                .upsert(rows, on_conflict=conflict_field, ignore_duplicates=ignore_duplicates)
                .execute()
            )
        except APIError as e:
            raise DestinationError(
                e.message or str(e),
                table=table,
                details={"code": e.code, "details": e.details, "hint": e.hint},
            ) from e
        except httpx.HTTPError as e:
            raise DestinationError(f"Request to {table} failed: {e}", table=table) from e
