"""
Change-feed sources.
"""

from .base_source import ErrorHandler, EventHandler, FeedDeliveryFailure, FeedSource
from .file_feed_source import FileFeedSource, parse_message

__all__ = [
    "ErrorHandler",
    "EventHandler",
    "FeedDeliveryFailure",
    "FeedSource",
    "FileFeedSource",
    "parse_message",
]
