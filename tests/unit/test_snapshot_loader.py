"""
Unit tests for snapshot loading and row rejection.
"""

import json

import pytest

from agrirent.core.models import Booking
from agrirent.store import SnapshotLoadError, load_snapshot_dir, parse_rows


@pytest.mark.unit
class TestParseRows:
    """Tests for splitting valid rows from rejected rows"""

    def test_valid_and_rejected_split(self):
        rows = [
            {"id": 1, "status": "Completed", "finalPrice": 100},
            {"id": 2, "status": "Completed", "finalPrice": -5},
            {"status": "Searching"},
            {"id": 4, "status": "Searching"},
        ]
        records, rejected = parse_rows(rows, Booking, "booking")

        assert [r.id for r in records] == [1, 4]
        assert [r.index for r in rejected] == [1, 2]
        assert rejected[0].entity == "booking"
        assert rejected[0].raw_payload == rows[1]
        assert any("finalPrice" in m for m in rejected[0].error_messages)
        assert any("id" in m for m in rejected[1].error_messages)

    def test_non_object_row_rejected(self):
        records, rejected = parse_rows(["not a record"], Booking, "booking")
        assert records == []
        assert rejected[0].error_messages


@pytest.mark.unit
class TestLoadSnapshotDir:
    """Tests for loading a snapshot directory into a store"""

    def test_loads_all_entities(self, snapshot_dir, sample_bookings, sample_items, sample_users):
        result = load_snapshot_dir(snapshot_dir)

        assert result.rejected == []
        assert list(result.store.list_bookings()) == sample_bookings
        assert list(result.store.list_items()) == sample_items
        assert list(result.store.list_users()) == sample_users
        assert [s.id for s in result.store.list_kyc_submissions()] == [3]

    def test_kyc_file_is_optional(self, snapshot_dir):
        (snapshot_dir / "kyc_submissions.json").unlink()
        result = load_snapshot_dir(snapshot_dir)
        assert result.store.list_kyc_submissions() == ()

    def test_missing_required_file(self, snapshot_dir):
        (snapshot_dir / "items.json").unlink()
        with pytest.raises(SnapshotLoadError, match="not found") as exc_info:
            load_snapshot_dir(snapshot_dir)
        assert exc_info.value.path.name == "items.json"

    def test_file_must_hold_array(self, snapshot_dir):
        (snapshot_dir / "users.json").write_text(json.dumps({"id": 1}))
        with pytest.raises(SnapshotLoadError, match="JSON array"):
            load_snapshot_dir(snapshot_dir)

    def test_invalid_json(self, snapshot_dir):
        (snapshot_dir / "bookings.json").write_text("[{")
        with pytest.raises(SnapshotLoadError, match="invalid JSON"):
            load_snapshot_dir(snapshot_dir)

    def test_bad_rows_are_reported_not_fatal(self, snapshot_dir):
        rows = json.loads((snapshot_dir / "bookings.json").read_text())
        rows.append({"id": 77, "status": "Completed", "finalPrice": "lots"})
        (snapshot_dir / "bookings.json").write_text(json.dumps(rows))

        result = load_snapshot_dir(snapshot_dir)

        assert len(result.store.list_bookings()) == 6
        assert len(result.rejected) == 1
        assert result.rejected[0].index == 6
        assert result.rejected[0].raw_payload["id"] == 77

    def test_rows_with_null_optional_fields_are_kept(self, snapshot_dir):
        rows = json.loads((snapshot_dir / "items.json").read_text())
        rows.append({"id": 5, "name": None, "category": "Tractors", "location": None, "available": None, "status": None})
        (snapshot_dir / "items.json").write_text(json.dumps(rows))

        result = load_snapshot_dir(snapshot_dir)

        assert result.rejected == []
        assert result.store.list_items()[-1].name == ""
