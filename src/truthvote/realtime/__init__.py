"""Realtime change events and subscriptions."""

from truthvote.realtime.events import ChangeEvent, ChangeType, row_of
from truthvote.realtime.hub import ChangeHub, Subscription

__all__ = [
    "ChangeEvent",
    "ChangeHub",
    "ChangeType",
    "Subscription",
    "row_of",
]
