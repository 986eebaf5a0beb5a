"""
Supplier KYC view: joins suppliers with their reconciled submission.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from pydantic import BaseModel, Field

from agrirent.core.models import KycDocument, KycStatus, KycSubmission, RiskLevel, User, UserRole


class SupplierKycRow(BaseModel):
    """
    One supplier's verification state as shown to admins.

    Attributes:
        user: The supplier
        kyc_status: Submission status, or a default derived from the user
        submitted_at: Submission time, if any
        docs: Submitted documents (empty without a submission)
        risk_level: Reviewer risk assessment (LOW by default)
        admin_notes: Reviewer notes
        submission_id: Backing submission, if any
    """

    user: User
    kyc_status: str
    submitted_at: datetime | None = None
    docs: list[KycDocument] = Field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW
    admin_notes: list[str] = Field(default_factory=list)
    submission_id: int | None = None

    @property
    def doc_types(self) -> list[str]:
        return [d.type for d in self.docs]


def resolve_submission(user_id: int, submissions: Iterable[KycSubmission]) -> KycSubmission | None:
    """
    First submission for the user.

    With the reconciler's ordering the first match is the most relevant
    one; if the source ever emits several submissions per user, the result
    depends on that order.
    """
    return next((s for s in submissions if s.user_id == user_id), None)


def default_kyc_status(user: User) -> str:
    return KycStatus.APPROVED.value if user.is_approved else KycStatus.PENDING.value


def build_supplier_kyc_rows(
    users: Sequence[User],
    submissions: Sequence[KycSubmission],
) -> list[SupplierKycRow]:
    """
    Build one row per supplier, in user order.

    Args:
        users: User snapshot
        submissions: Reconciled submissions, in presentation order

    Returns:
        Rows for every user whose role is Supplier
    """
    rows = []
    for user in users:
        if user.role != UserRole.SUPPLIER:
            continue
        submission = resolve_submission(user.id, submissions)
        if submission is None:
            rows.append(SupplierKycRow(user=user, kyc_status=default_kyc_status(user)))
            continue
        rows.append(
            SupplierKycRow(
                user=user,
                kyc_status=submission.status or default_kyc_status(user),
                submitted_at=submission.submitted_at,
                docs=list(submission.docs),
                risk_level=submission.risk_level,
                admin_notes=list(submission.admin_notes),
                submission_id=submission.id,
            )
        )
    return rows
