"""Driver collaborator interface."""

from .base import (
    BaseDriver,
    BookkeepingReceipt,
    CommandFunc,
    CommandHistoryEntry,
    EventHistory,
)


__all__ = [
    "BaseDriver",
    "BookkeepingReceipt",
    "CommandFunc",
    "CommandHistoryEntry",
    "EventHistory",
]
