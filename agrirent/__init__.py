"""
agrirent: marketplace analytics and KYC change-feed reconciliation.
"""

__version__ = "0.1.0"
