"""
Pytest configuration and fixtures for agrirent tests

Provides snapshot factories, a fixed evaluation time and on-disk snapshot
and feed fixtures shared by unit and integration tests.
"""
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from agrirent.core.models import Booking, Item, KycDocument, KycSubmission, UpsertEvent, User


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that exercise several components through files"
    )


# =======================
# FACTORIES
# =======================

def make_booking(id: int, **overrides) -> Booking:
    fields = {
        "id": id,
        "itemId": None,
        "itemCategory": "Tractors",
        "location": "Nashik",
        "status": "Searching",
        "startTime": "09:00",
        "date": "2025-10-04",
        "finalPrice": None,
    }
    fields.update(overrides)
    return Booking.model_validate(fields)


def make_item(id: int, **overrides) -> Item:
    fields = {
        "id": id,
        "name": f"Machine {id}",
        "category": "Tractors",
        "location": "Nashik",
        "available": True,
        "status": "approved",
    }
    fields.update(overrides)
    return Item.model_validate(fields)


def make_user(id: int, role: str = "Farmer", **overrides) -> User:
    fields = {"id": id, "role": role, "name": f"User {id}", "status": "pending"}
    fields.update(overrides)
    return User.model_validate(fields)


def make_submission(id: int, user_id: int, status: str = "Pending", **overrides) -> KycSubmission:
    fields = {
        "id": id,
        "userId": user_id,
        "status": status,
        "submittedAt": "2025-10-02T08:15:00Z",
        "docs": [{"type": "Aadhaar"}, {"type": "GST"}],
    }
    fields.update(overrides)
    return KycSubmission.model_validate(fields)


def make_event(id: int, user_id: int, status: str = "Pending", **overrides) -> UpsertEvent:
    return UpsertEvent(record=make_submission(id, user_id, status, **overrides))


@pytest.fixture
def booking_factory():
    return make_booking


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def submission_factory():
    return make_submission


@pytest.fixture
def event_factory():
    return make_event


# =======================
# SNAPSHOT FIXTURES
# =======================

@pytest.fixture
def fixed_now() -> datetime:
    """Evaluation time for reproducible reports (a July date)"""
    return datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_items() -> list[Item]:
    return [
        make_item(1, name="Mahindra 575", category="Tractors", location="Nashik"),
        make_item(2, name="John Deere 5050", category="Tractors", location="Pune"),
        make_item(3, name="Kartar 4000", category="Harvesters", location="Nashik", available=False),
        make_item(4, name="Boom Sprayer", category="Sprayers", location="Pune", status="pending"),
    ]


@pytest.fixture
def sample_bookings() -> list[Booking]:
    return [
        make_booking(1, itemId=1, status="Completed", finalPrice=1000, startTime="09:00", date="2025-09-10"),
        make_booking(2, itemId=1, status="Completed", finalPrice=3000, startTime="14:30", date="2025-10-01"),
        make_booking(3, itemId=3, itemCategory="Harvesters", status="Completed", finalPrice=5000,
                     startTime="07:15", date="2025-10-20"),
        make_booking(4, itemCategory="Harvesters", status="Searching", startTime="07:45", date="2025-11-02"),
        make_booking(5, itemCategory="Harvesters", status="Searching", location="Pune", date="2025-06-11"),
        make_booking(6, status="Searching", location=None, startTime=None, date=None),
    ]


@pytest.fixture
def sample_users() -> list[User]:
    return [
        make_user(1, "Farmer"),
        make_user(2, "Farmer"),
        make_user(10, "Supplier", name="Ravi Patil", status="approved"),
        make_user(11, "Supplier", name="Sunita Jadhav"),
        make_user(99, "Admin"),
    ]


def _dump(records) -> list[dict]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


@pytest.fixture
def snapshot_dir(tmp_path, sample_bookings, sample_items, sample_users) -> Path:
    """
    Directory holding JSON snapshots of the sample records plus one
    KYC submission for supplier 11
    """
    directory = tmp_path / "snapshot"
    directory.mkdir()
    (directory / "bookings.json").write_text(json.dumps(_dump(sample_bookings)))
    (directory / "items.json").write_text(json.dumps(_dump(sample_items)))
    (directory / "users.json").write_text(json.dumps(_dump(sample_users)))
    (directory / "kyc_submissions.json").write_text(
        json.dumps(_dump([make_submission(3, 11, "Pending")]))
    )
    return directory


@pytest.fixture
def write_feed(tmp_path):
    """Write change-feed lines (dicts or raw strings) to a JSON-lines file"""

    def _write(lines, name: str = "feed.jsonl") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write((line if isinstance(line, str) else json.dumps(line)) + "\n")
        return path

    return _write
