"""
Supplier KYC view and admin actions.
"""

from .actions import InMemoryNotifier, KycAdminActions, LoggingNotifier, Notifier
from .views import SupplierKycRow, build_supplier_kyc_rows, default_kyc_status, resolve_submission

__all__ = [
    "InMemoryNotifier",
    "KycAdminActions",
    "LoggingNotifier",
    "Notifier",
    "SupplierKycRow",
    "build_supplier_kyc_rows",
    "default_kyc_status",
    "resolve_submission",
]
