"""
JSON snapshot loading.

Reads bookings.json, items.json, users.json and (optionally)
kyc_submissions.json from a directory. Each file holds a JSON array of
camelCase records as exported by the record source. Rows that fail model
validation are rejected with their error context instead of aborting the
load.
"""

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from agrirent.core.models import Booking, Item, KycSubmission, User
from agrirent.observability.logger import get_logger
from agrirent.observability.metrics import increment_counter, snapshot_records_total

from .record_store import InMemoryRecordStore

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SNAPSHOT_FILES = {
    "booking": "bookings.json",
    "item": "items.json",
    "user": "users.json",
    "kyc_submission": "kyc_submissions.json",
}
OPTIONAL_ENTITIES = {"kyc_submission"}


class SnapshotLoadError(Exception):
    """Raised when a snapshot file is missing or is not a JSON array."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class RejectedRow(BaseModel):
    """
    A snapshot row that could not be turned into a model.

    Attributes:
        entity: "booking", "item", "user" or "kyc_submission"
        index: Position of the row in its file
        raw_payload: The row as read
        error_messages: Validation errors, one per failing field
    """

    entity: str
    index: int
    raw_payload: Any
    error_messages: list[str] = Field(..., min_length=1)


class SnapshotLoadResult(BaseModel):
    store: InMemoryRecordStore
    rejected: list[RejectedRow] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True


def parse_rows(
    rows: list[Any],
    model: type[ModelT],
    entity: str,
) -> tuple[list[ModelT], list[RejectedRow]]:
    """
    Validate raw rows into models, splitting accepted from rejected.

    Args:
        rows: Decoded JSON rows
        model: Target pydantic model
        entity: Entity label for metrics and rejection records

    Returns:
        (records, rejected) in input order
    """
    records: list[ModelT] = []
    rejected: list[RejectedRow] = []

    for index, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            messages = [
                f"{'.'.join(str(p) for p in err['loc']) or entity}: {err['msg']}"
                for err in e.errors()
            ]
            rejected.append(
                RejectedRow(entity=entity, index=index, raw_payload=row, error_messages=messages)
            )

    if records:
        increment_counter(snapshot_records_total, len(records), entity=entity, status="loaded")
    if rejected:
        increment_counter(snapshot_records_total, len(rejected), entity=entity, status="rejected")
        logger.warning(
            f"Rejected {len(rejected)} {entity} rows",
            extra={"entity": entity, "rejected": len(rejected), "loaded": len(records)},
        )

    return records, rejected


def read_json_array(path: Path) -> list[Any]:
    """
    Read a JSON array file.

    Raises:
        SnapshotLoadError: If the file is missing, undecodable, or not an array
    """
    if not path.exists():
        raise SnapshotLoadError(path, "snapshot file not found")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise SnapshotLoadError(path, "expected a JSON array of records")
    return data


def load_snapshot_dir(snapshot_dir: str | Path) -> SnapshotLoadResult:
    """
    Build an InMemoryRecordStore from a snapshot directory.

    Args:
        snapshot_dir: Directory containing the snapshot files

    Returns:
        SnapshotLoadResult with the populated store and all rejected rows

    Raises:
        SnapshotLoadError: If a required file is missing or malformed
    """
    base = Path(snapshot_dir)
    models: dict[str, type[BaseModel]] = {
        "booking": Booking,
        "item": Item,
        "user": User,
        "kyc_submission": KycSubmission,
    }

    loaded: dict[str, list] = {}
    rejected: list[RejectedRow] = []
    for entity, filename in SNAPSHOT_FILES.items():
        path = base / filename
        if entity in OPTIONAL_ENTITIES and not path.exists():
            loaded[entity] = []
            continue
        records, bad = parse_rows(read_json_array(path), models[entity], entity)
        loaded[entity] = records
        rejected.extend(bad)

    logger.info(
        f"Loaded snapshot from {base}",
        extra={
            "bookings": len(loaded["booking"]),
            "items": len(loaded["item"]),
            "users": len(loaded["user"]),
            "kyc_submissions": len(loaded["kyc_submission"]),
            "rejected": len(rejected),
        },
    )

    store = InMemoryRecordStore(
        bookings=loaded["booking"],
        items=loaded["item"],
        users=loaded["user"],
        kyc_submissions=loaded["kyc_submission"],
    )
    return SnapshotLoadResult(store=store, rejected=rejected)
