"""
KYC admin actions.

Thin pass-throughs from the admin screen to the record store and the
notifier. None of these touch the reconciled view directly: the resulting
record changes come back through the change feed.
"""

from abc import ABC, abstractmethod

from agrirent.core.models import DocumentStatus, KycSubmission, Notification, User
from agrirent.observability.logger import get_logger
from agrirent.observability.metrics import increment_counter, kyc_admin_actions_total
from agrirent.store import RecordStore

logger = get_logger(__name__)

ADMIN_CHANNEL_USER_ID = 0


class Notifier(ABC):
    """Notification delivery collaborator."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass


class InMemoryNotifier(Notifier):
    """Collects notifications in a list."""

    def __init__(self):
        self.sent: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.sent.append(notification)


class LoggingNotifier(Notifier):
    """Writes notifications to the log instead of delivering them."""

    def notify(self, notification: Notification) -> None:
        logger.info(
            f"Notification: {notification.message}",
            extra={"user_id": notification.user_id, "notification_type": notification.type},
        )


class KycAdminActions:
    """
    Admin operations on supplier verification.

    Each method returns what it changed (or sent), or None when there was
    nothing to act on.
    """

    def __init__(self, store: RecordStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def approve(self, user_id: int) -> User | None:
        return self._set_status(user_id, "approved", action="approve")

    def reject(self, user_id: int) -> User | None:
        return self._set_status(user_id, "rejected", action="reject")

    def request_reupload(self, user_id: int, doc_type: str) -> KycSubmission | None:
        """
        Mark one document for re-upload and ask the supplier to resubmit it.

        Args:
            user_id: Supplier whose submission is affected
            doc_type: Document kind, e.g. "Aadhaar"

        Returns:
            The updated submission, or None if the user has no submission
        """
        submission = self.store.find_submission_for_user(user_id)
        if submission is None:
            self._record("request_reupload", "skipped", user_id)
            return None

        docs = tuple(
            d.model_copy(update={"status": DocumentStatus.REUPLOAD_REQUESTED.value}) if d.type == doc_type else d
            for d in submission.docs
        )
        updated = submission.model_copy(update={"docs": docs})
        self.store.save_submission(updated)
        self.notifier.notify(
            Notification(user_id=user_id, message=f"Please re-upload {doc_type} for KYC.", type="admin")
        )
        self._record("request_reupload", "applied", user_id, doc_type=doc_type)
        return updated

    def add_note(self, user_id: int, note: str) -> KycSubmission | None:
        """Append an admin note to the user's submission."""
        submission = self.store.find_submission_for_user(user_id)
        if submission is None:
            self._record("add_note", "skipped", user_id)
            return None

        updated = submission.model_copy(update={"admin_notes": (*submission.admin_notes, note)})
        self.store.save_submission(updated)
        self._record("add_note", "applied", user_id)
        return updated

    def raise_fraud_flag(self, user: User, reason: str) -> Notification:
        """Alert the admin channel; no record is modified."""
        notification = Notification(
            user_id=ADMIN_CHANNEL_USER_ID,
            message=f"KYC flag: {user.name} - {reason}",
            type="admin",
        )
        self.notifier.notify(notification)
        self._record("fraud_flag", "applied", user.id, reason=reason)
        return notification

    def _set_status(self, user_id: int, status: str, action: str) -> User | None:
        updated = self.store.update_user_status(user_id, status)
        self._record(action, "applied" if updated else "skipped", user_id)
        return updated

    def _record(self, action: str, status: str, user_id: int, **extra) -> None:
        increment_counter(kyc_admin_actions_total, action=action, status=status)
        logger.info(
            f"KYC admin action {action} {status}",
            extra={"action": action, "status": status, "user_id": user_id, **extra},
        )
