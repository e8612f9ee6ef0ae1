"""Pre-schedule lifecycle state machine.

States move ``draft -> open -> closed -> locked`` with a ``closed -> open``
re-open. Every operation returns a new request and leaves its input
untouched; persisting the result (with a conditional write on the prior
status) is the caller's job.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import Optional

from wardroster.domain.models import PreScheduleRequest, RequestStatus, WriterCapabilities
from wardroster.errors import InvalidTransition, RequestLocked, RequestNotOpen, WardRosterError

logger = logging.getLogger(__name__)

# Successor states accepted from each state
TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.DRAFT: frozenset({RequestStatus.OPEN}),
    RequestStatus.OPEN: frozenset({RequestStatus.CLOSED, RequestStatus.LOCKED}),
    RequestStatus.CLOSED: frozenset({RequestStatus.OPEN, RequestStatus.LOCKED}),
    RequestStatus.LOCKED: frozenset(),
}

# Source states each operation accepts
OPEN_FROM = frozenset({RequestStatus.DRAFT})
CLOSE_FROM = frozenset({RequestStatus.OPEN})
REOPEN_FROM = frozenset({RequestStatus.CLOSED})
LOCK_FROM = frozenset({RequestStatus.OPEN, RequestStatus.CLOSED})

# States in which an administrative override may still edit wishes
OVERRIDE_WRITABLE = frozenset({RequestStatus.DRAFT, RequestStatus.OPEN})


class Notifier(ABC):
    """Receives lifecycle events worth telling staff about.

    The engine only signals intent; delivery belongs to the implementation.
    """

    @abstractmethod
    def pre_schedule_opened(self, request: PreScheduleRequest) -> None:
        pass


def can_transition(request: PreScheduleRequest, target: RequestStatus) -> bool:
    return target in TRANSITIONS[request.status]


def _transition(
    request: PreScheduleRequest,
    target: RequestStatus,
    sources: frozenset[RequestStatus],
    **changes,
) -> PreScheduleRequest:
    if request.status not in sources or not can_transition(request, target):
        logger.warning(
            "Rejected pre-schedule transition %s/%04d-%02d: %s -> %s",
            request.unit_id, request.year, request.month,
            request.status.value, target.value,
        )
        raise InvalidTransition(request.status, target)

    updated = replace(request, status=target, **changes)
    logger.info(
        "Pre-schedule %s/%04d-%02d: %s -> %s",
        request.unit_id, request.year, request.month,
        request.status.value, target.value,
    )
    return updated


def open_request(
    request: PreScheduleRequest,
    close_date: date,
    notifier: Optional[Notifier] = None,
    open_date: Optional[date] = None,
) -> PreScheduleRequest:
    """Open a draft request for submissions until ``close_date``.

    Args:
        request: Request in draft status.
        close_date: Last editing day (inclusive).
        notifier: Told that the pre-schedule opened.
        open_date: First editing day; keeps the request's value when omitted.

    Returns:
        The opened request.

    Raises:
        InvalidTransition: If the request is not a draft.
        ValueError: If the editing window is empty.
    """
    start = open_date or request.open_date
    if start is not None and close_date < start:
        raise ValueError(f"close_date {close_date} is before open_date {start}")

    updated = _transition(
        request, RequestStatus.OPEN, OPEN_FROM, open_date=start, close_date=close_date
    )
    if notifier is not None:
        notifier.pre_schedule_opened(updated)
    return updated


def close_request(request: PreScheduleRequest) -> PreScheduleRequest:
    """Stop accepting participant submissions."""
    return _transition(request, RequestStatus.CLOSED, CLOSE_FROM)


def reopen_request(
    request: PreScheduleRequest,
    close_date: Optional[date] = None,
) -> PreScheduleRequest:
    """Re-open a closed request, optionally moving its close date."""
    if close_date is None:
        return _transition(request, RequestStatus.OPEN, REOPEN_FROM)
    if request.open_date is not None and close_date < request.open_date:
        raise ValueError(f"close_date {close_date} is before open_date {request.open_date}")
    return _transition(request, RequestStatus.OPEN, REOPEN_FROM, close_date=close_date)


def lock_request(request: PreScheduleRequest) -> PreScheduleRequest:
    """Lock the request permanently. Scheduling policy locks from closed."""
    if request.status is RequestStatus.OPEN:
        logger.info(
            "Locking pre-schedule %s/%04d-%02d directly from open",
            request.unit_id, request.year, request.month,
        )
    return _transition(request, RequestStatus.LOCKED, LOCK_FROM)


def write_denial(
    request: PreScheduleRequest,
    capabilities: WriterCapabilities,
    today: date,
) -> Optional[WardRosterError]:
    """Explain why a wish set may not be written, or return None.

    Participants write only while the request is open and ``today`` lies in
    ``[open_date, close_date]``. An administrative override writes in draft
    or open regardless of date, never once closed or locked.
    """
    status = request.status
    if status is RequestStatus.LOCKED:
        return RequestLocked()

    if capabilities.admin_override:
        if status in OVERRIDE_WRITABLE:
            return None
        return RequestNotOpen(f"Pre-schedule is {status.value}; override edits are closed")

    if status is not RequestStatus.OPEN:
        return RequestNotOpen(f"Pre-schedule is {status.value}")
    if request.open_date is not None and today < request.open_date:
        return RequestNotOpen(f"Editing opens on {request.open_date}")
    if request.close_date is not None and today > request.close_date:
        return RequestNotOpen(f"Editing closed on {request.close_date}")
    return None


def can_write(
    request: PreScheduleRequest,
    capabilities: WriterCapabilities,
    today: date,
) -> bool:
    return write_denial(request, capabilities, today) is None


def ensure_writable(
    request: PreScheduleRequest,
    capabilities: WriterCapabilities,
    today: date,
) -> None:
    """Raise RequestLocked or RequestNotOpen when writing is not allowed."""
    denial = write_denial(request, capabilities, today)
    if denial is not None:
        raise denial
