"""Pre-schedule lifecycle and the persistence interface it relies on."""

from wardroster.lifecycle.lifecycle import (
    TRANSITIONS,
    Notifier,
    can_transition,
    can_write,
    close_request,
    ensure_writable,
    lock_request,
    open_request,
    reopen_request,
    write_denial,
)
from wardroster.lifecycle.store import InMemorySubmissionStore, SubmissionStore

__all__ = [
    "TRANSITIONS",
    "Notifier",
    "can_transition",
    "can_write",
    "close_request",
    "ensure_writable",
    "lock_request",
    "open_request",
    "reopen_request",
    "write_denial",
    # Store
    "InMemorySubmissionStore",
    "SubmissionStore",
]
