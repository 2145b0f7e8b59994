"""Unit tests for batched writes with per-record fallback."""

import pytest

from firesync.loaders import DryRunLoader
from firesync.models.record import SourceRecord
from firesync.models.run import SyncMode
from firesync.services.normalizer import ABSENT

from conftest import RecordingLoader


def _records(count, collection="users"):
    return [SourceRecord(id=f"r{i}", collection=collection, data={"n": i}) for i in range(count)]


def test_records_are_written_in_chunks_of_batch_size() -> None:
    """250 records should go out as 100, 100 and 50."""
    loader = RecordingLoader()

    result = loader.write("users", _records(250))

    assert [len(c["rows"]) for c in loader.calls] == [100, 100, 50]
    assert (result.success_count, result.error_count) == (250, 0)
    assert result.batches == 3


def test_dry_run_never_calls_destination() -> None:
    loader = RecordingLoader()

    result = loader.write("users", _records(7), SyncMode.DRY_RUN)

    assert loader.calls == []
    assert (result.success_count, result.error_count) == (7, 0)


def test_empty_input_never_calls_destination() -> None:
    loader = RecordingLoader()

    for mode in SyncMode:
        result = loader.write("users", [], mode)
        assert (result.success_count, result.error_count) == (0, 0)

    assert loader.calls == []


def test_mode_controls_duplicate_handling() -> None:
    loader = RecordingLoader()

    loader.write("users", _records(1), SyncMode.UPSERT)
    loader.write("users", _records(1), SyncMode.FORCE)

    assert [c["ignore_duplicates"] for c in loader.calls] == [True, False]
    assert all(c["conflict_field"] == "id" for c in loader.calls)


def test_rejected_batch_falls_back_to_individual_writes() -> None:
    """A transient batch failure still lands every record."""
    loader = RecordingLoader(fail_batches_over=1)

    result = loader.write("users", _records(3))

    assert [len(c["rows"]) for c in loader.calls] == [3, 1, 1, 1]
    assert (result.success_count, result.error_count) == (3, 0)


def test_fallback_keeps_conflict_options() -> None:
    loader = RecordingLoader(fail_batches_over=1)

    loader.write("users", _records(2), SyncMode.FORCE, conflict_field="email")

    assert {(c["conflict_field"], c["ignore_duplicates"]) for c in loader.calls} == {("email", False)}


def test_bad_records_only_cost_themselves() -> None:
    """Fallback is scoped to the failing chunk, bad rows are counted."""
    loader = RecordingLoader(batch_size=2, bad_ids=["r1"])

    result = loader.write("users", _records(4))

    assert [len(c["rows"]) for c in loader.calls] == [2, 1, 1, 2]
    assert (result.success_count, result.error_count) == (3, 1)
    assert result.errors[0]["record_id"] == "r1"
    assert sorted(loader.tables["users"]) == ["r0", "r2", "r3"]


def test_write_never_raises_when_every_call_fails() -> None:
    loader = RecordingLoader(fail_tables=["users"])

    result = loader.write("users", _records(5))

    assert (result.success_count, result.error_count) == (0, 5)
    assert result.success_count + result.error_count == 5


def test_rows_are_sanitized_and_carry_document_id() -> None:
    loader = RecordingLoader()
    record = SourceRecord(id="doc", collection="users", data={"id": "body", "gone": ABSENT, "empty": None})

    loader.write("users", [record])

    assert loader.calls[0]["rows"] == [{"id": "doc", "empty": None}]


def test_upsert_mode_keeps_existing_rows_and_force_overwrites() -> None:
    loader = RecordingLoader()
    loader.write("users", [SourceRecord("u1", "users", {"name": "old"})])

    loader.write("users", [SourceRecord("u1", "users", {"name": "new"})], SyncMode.UPSERT)
    assert loader.tables["users"]["u1"]["name"] == "old"

    loader.write("users", [SourceRecord("u1", "users", {"name": "new"})], SyncMode.FORCE)
    assert loader.tables["users"]["u1"]["name"] == "new"


def test_batch_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RecordingLoader(batch_size=0)


def test_dry_run_loader_supports_dry_runs_only() -> None:
    loader = DryRunLoader()

    assert loader.write("users", _records(2), SyncMode.DRY_RUN).success_count == 2
    assert loader.write("users", _records(2), SyncMode.UPSERT).error_count == 2
