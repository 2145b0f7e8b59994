"""Unit tests for the Supabase loader."""

from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from firesync.errors import DestinationError
from firesync.loaders import SupabaseLoader
from firesync.models.record import SourceRecord
from firesync.models.run import SyncMode


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def loader(client):
    return SupabaseLoader("https://demo.supabase.co/", "service-key", client=client)


def _upsert(client):
    return client.table.return_value.upsert


def test_upsert_goes_through_table_client(loader, client) -> None:
    rows = [{"id": "u1", "name": "Ada"}, {"id": "u2", "email": "g@x"}]

    loader.upsert_batch("users", rows)

    client.table.assert_called_once_with("users")
    _upsert(client).assert_called_once_with(rows, on_conflict="id", ignore_duplicates=True)
    _upsert(client).return_value.execute.assert_called_once_with()


def test_force_mode_overwrites_duplicates(loader, client) -> None:
    loader.write("users", [SourceRecord("u1", "users", {})], SyncMode.FORCE)

    assert _upsert(client).call_args[1]["ignore_duplicates"] is False


def test_custom_conflict_field(loader, client) -> None:
    loader.upsert_batch("settings", [{"id": "s1", "key": "theme"}], conflict_field="key")

    assert _upsert(client).call_args[1]["on_conflict"] == "key"


def test_api_error_raises_destination_error_with_message(loader, client) -> None:
    _upsert(client).return_value.execute.side_effect = APIError({
        "message": "Could not find the 'foo' column",
        "code": "PGRST204",
        "hint": None,
        "details": None,
    })

    with pytest.raises(DestinationError) as exc:
        loader.upsert_batch("users", [{"id": "u1", "foo": 1}])

    assert exc.value.table == "users"
    assert exc.value.details["code"] == "PGRST204"
    assert "foo" in str(exc.value)


def test_transport_error_raises_destination_error(loader, client) -> None:
    _upsert(client).return_value.execute.side_effect = httpx.ConnectError("refused")

    with pytest.raises(DestinationError):
        loader.upsert_batch("users", [{"id": "u1"}])


def test_write_falls_back_per_record_on_api_error(loader, client) -> None:
    """Batch rejected, then one record fails on its own."""
    _upsert(client).return_value.execute.side_effect = [
        APIError({"message": "invalid input syntax", "code": "22P02"}),
        MagicMock(),
        APIError({"message": "duplicate key value", "code": "23505"}),
    ]

    result = loader.write("users", [SourceRecord("u1", "users", {}), SourceRecord("u2", "users", {})])

    assert _upsert(client).call_count == 3
    assert (result.success_count, result.error_count) == (1, 1)
    assert result.errors[0]["record_id"] == "u2"


def test_empty_rows_make_no_request(loader, client) -> None:
    loader.upsert_batch("users", [])

    client.table.assert_not_called()
