"""
File-backed change feed.

Reads KYC submission change messages from a JSON-lines file, one message
per line, in file order. Supports a one-shot replay and incremental polling
of lines appended since the last read.

Accepted line shapes:
    {"record": {...submission...}}
    {"eventType": "INSERT" | "UPDATE", "new": {...submission...}}

DELETE row changes are skipped: the reconciled view has no tombstones.
"""

import json
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from agrirent.core.models import KycSubmission, UpsertEvent
from agrirent.observability.logger import get_logger
from agrirent.observability.metrics import feed_events_skipped_total, increment_counter

from .base_source import ErrorHandler, EventHandler, FeedDeliveryFailure, FeedSource

logger = get_logger(__name__)

DELETE_EVENT = "DELETE"


def parse_message(line: str, source_id: str = "feed") -> UpsertEvent | None:
    """
    Parse one feed line into an UpsertEvent.

    Args:
        line: Raw JSON text
        source_id: Source label for error reporting

    Returns:
        The event, or None for a DELETE message

    Raises:
        FeedDeliveryFailure: If the line is not a valid change message
    """
    try:
        message: Any = json.loads(line)
    except json.JSONDecodeError as e:
        raise FeedDeliveryFailure(source_id, f"invalid JSON: {e}") from e

    if not isinstance(message, dict):
        raise FeedDeliveryFailure(source_id, "change message must be a JSON object")

    try:
        if "record" in message:
            return UpsertEvent.model_validate(message)

        event_type = str(message.get("eventType", "UPSERT")).upper()
        if event_type == DELETE_EVENT:
            return None
        if "new" not in message:
            raise FeedDeliveryFailure(source_id, "change message has neither 'record' nor 'new'")
        record = KycSubmission.model_validate(message["new"])
        return UpsertEvent(record=record, event_type=event_type)
    except ValidationError as e:
        raise FeedDeliveryFailure(source_id, f"invalid submission: {e}") from e


class FileFeedSource(FeedSource):
    """
    JSON-lines feed source with offset tracking.

    Delivery happens on the thread that calls poll() or replay(); events are
    handed to the subscriber strictly in file order.
    """

    def __init__(self, path: str | Path, source_id: str = "kyc_feed_file"):
        """
        Args:
            path: JSON-lines file to read
            source_id: Identifier used in logs and failures
        """
        super().__init__(source_id)
        self.path = Path(path)
        self._offset = 0
        self._lock = threading.Lock()
        self._on_event: EventHandler | None = None
        self._on_error: ErrorHandler | None = None
        self.delivered = 0

        logger.info(f"Initialized FileFeedSource for {source_id} reading {self.path}")

    @property
    def is_subscribed(self) -> bool:
        return self._on_event is not None

    @property
    def offset(self) -> int:
        return self._offset

    def subscribe(self, on_event: EventHandler, on_error: ErrorHandler | None = None) -> None:
        if self.is_subscribed:
            raise RuntimeError(f"Feed {self.source_id} already has a subscriber")
        self._on_event = on_event
        self._on_error = on_error

    def unsubscribe(self) -> None:
        if not self.is_subscribed:
            return
        self._on_event = None
        self._on_error = None
        logger.info(f"Unsubscribed from feed {self.source_id}")

    def replay(self) -> int:
        """Deliver the whole file from the beginning; returns events delivered."""
        with self._lock:
            self._offset = 0
        return self.poll(include_partial=True)

    def poll(self, include_partial: bool = False) -> int:
        """
        Deliver lines appended since the last read.

        Args:
            include_partial: Also consume a final line lacking a newline;
                leave False while a writer may still be appending

        Returns:
            Number of events delivered
        """
        if not self.is_subscribed:
            raise RuntimeError(f"Feed {self.source_id} has no subscriber")

        with self._lock:
            if not self.path.exists():
                self._fail(FeedDeliveryFailure(self.source_id, f"feed file not found: {self.path}"))
                return 0

            with open(self.path, "rb") as f:
                f.seek(self._offset)
                chunk = f.read()

            lines = chunk.split(b"\n")
            # Last element is b"" after a trailing newline, or an incomplete line
            tail = lines.pop()
            if include_partial and tail.strip():
                lines.append(tail)
                consumed = len(chunk)
            else:
                consumed = len(chunk) - len(tail)
            self._offset += consumed

        delivered = 0
        for raw in lines:
            on_event = self._on_event
            if on_event is None:
                break
            try:
                text = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                increment_counter(feed_events_skipped_total, reason="malformed")
                self._fail(FeedDeliveryFailure(self.source_id, f"invalid UTF-8: {e}"))
                continue
            if not text:
                continue
            try:
                event = parse_message(text, self.source_id)
            except FeedDeliveryFailure as failure:
                increment_counter(feed_events_skipped_total, reason="malformed")
                self._fail(failure)
                continue

            if event is None:
                increment_counter(feed_events_skipped_total, reason="delete")
                logger.warning(
                    "Skipping DELETE change message; deletions are not applied",
                    extra={"source_id": self.source_id},
                )
                continue

            on_event(event)
            delivered += 1

        self.delivered += delivered
        return delivered

    def follow(self, stop: threading.Event, poll_interval_seconds: float = 1.0) -> int:
        """
        Poll repeatedly until ``stop`` is set or the subscriber detaches.

        Returns:
            Total events delivered while following
        """
        total = 0
        while not stop.is_set() and self.is_subscribed:
            total += self.poll()
            stop.wait(poll_interval_seconds)
        return total

    def _fail(self, failure: FeedDeliveryFailure) -> None:
        logger.error(str(failure), extra={"source_id": self.source_id})
        on_error = self._on_error
        if on_error is None:
            raise failure
        on_error(failure)
