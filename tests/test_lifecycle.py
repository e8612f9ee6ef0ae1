"""Tests for the pre-schedule lifecycle state machine."""

import logging
from datetime import date

import pytest

from wardroster.domain.models import PreScheduleRequest, RequestStatus, WriterCapabilities
from wardroster.errors import InvalidTransition, RequestLocked, RequestNotOpen
from wardroster.lifecycle import (
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


class RecordingNotifier(Notifier):
    def __init__(self):
        self.opened = []

    def pre_schedule_opened(self, request):
        self.opened.append(request.key)


@pytest.fixture
def draft():
    """Create a draft request for March 2025."""
    return PreScheduleRequest(unit_id="ward-7", year=2025, month=3)


class TestTransitions:
    """Tests for legal and illegal transitions."""

    def test_full_legal_sequence(self, draft):
        """draft -> open -> closed -> open -> locked is legal."""
        request = open_request(draft, close_date=date(2025, 2, 25))
        assert request.status is RequestStatus.OPEN

        request = close_request(request)
        assert request.status is RequestStatus.CLOSED

        request = reopen_request(request)
        assert request.status is RequestStatus.OPEN

        request = lock_request(request)
        assert request.status is RequestStatus.LOCKED

    def test_draft_cannot_lock(self, draft):
        """Locking a draft directly is rejected."""
        with pytest.raises(InvalidTransition) as exc_info:
            lock_request(draft)
        assert exc_info.value.current is RequestStatus.DRAFT
        assert exc_info.value.target is RequestStatus.LOCKED

    def test_lock_from_closed(self, draft):
        """The usual path locks a closed request."""
        request = close_request(open_request(draft, close_date=date(2025, 2, 25)))
        assert lock_request(request).status is RequestStatus.LOCKED

    def test_locked_is_terminal(self, draft):
        """No operation leaves the locked state."""
        locked = lock_request(close_request(open_request(draft, date(2025, 2, 25))))

        with pytest.raises(InvalidTransition):
            open_request(locked, date(2025, 2, 28))
        with pytest.raises(InvalidTransition):
            close_request(locked)
        with pytest.raises(InvalidTransition):
            reopen_request(locked)
        with pytest.raises(InvalidTransition):
            lock_request(locked)

    def test_cannot_close_draft_or_reopen_open(self, draft):
        """Only the listed successor of the current state is accepted."""
        with pytest.raises(InvalidTransition):
            close_request(draft)
        with pytest.raises(InvalidTransition):
            reopen_request(draft)
        opened = open_request(draft, date(2025, 2, 25))
        with pytest.raises(InvalidTransition):
            reopen_request(opened)
        with pytest.raises(InvalidTransition):
            open_request(opened, date(2025, 2, 25))

    def test_open_requires_draft(self, draft):
        """A closed request is re-opened, never opened again."""
        notifier = RecordingNotifier()
        closed = close_request(open_request(draft, date(2025, 2, 25)))

        with pytest.raises(InvalidTransition) as exc_info:
            open_request(closed, date(2025, 2, 28), notifier=notifier)
        assert exc_info.value.current is RequestStatus.CLOSED
        assert notifier.opened == []

    def test_reopen_draft_keeps_draft(self, draft):
        """Re-opening a draft fails and leaves no close date behind."""
        with pytest.raises(InvalidTransition):
            reopen_request(draft, close_date=date(2025, 2, 25))
        assert draft.status is RequestStatus.DRAFT
        assert draft.close_date is None

    def test_can_transition(self, draft):
        """can_transition mirrors the transition table."""
        assert can_transition(draft, RequestStatus.OPEN)
        assert not can_transition(draft, RequestStatus.CLOSED)
        assert not can_transition(draft, RequestStatus.LOCKED)

    def test_input_is_not_mutated(self, draft):
        """Transitions return a new request and leave the input alone."""
        opened = open_request(draft, close_date=date(2025, 2, 25))
        assert draft.status is RequestStatus.DRAFT
        assert draft.close_date is None
        assert opened is not draft

    def test_open_sets_window(self, draft):
        """open_request stores the close date and optional open date."""
        opened = open_request(
            draft, close_date=date(2025, 2, 25), open_date=date(2025, 2, 10)
        )
        assert opened.open_date == date(2025, 2, 10)
        assert opened.close_date == date(2025, 2, 25)

    def test_open_rejects_empty_window(self, draft):
        """A close date before the open date is an error."""
        with pytest.raises(ValueError):
            open_request(draft, close_date=date(2025, 2, 1), open_date=date(2025, 2, 10))

    def test_reopen_moves_close_date(self, draft):
        """Re-opening may extend the editing window."""
        closed = close_request(open_request(draft, date(2025, 2, 20)))
        reopened = reopen_request(closed, close_date=date(2025, 2, 27))
        assert reopened.close_date == date(2025, 2, 27)

    def test_open_notifies(self, draft):
        """Opening signals the notifier with the opened request."""
        notifier = RecordingNotifier()
        open_request(draft, date(2025, 2, 25), notifier=notifier)
        assert notifier.opened == [("ward-7", 2025, 3)]

    def test_rejected_transition_does_not_notify(self, draft):
        """A failed open leaves the notifier untouched."""
        notifier = RecordingNotifier()
        opened = open_request(draft, date(2025, 2, 25))
        with pytest.raises(InvalidTransition):
            open_request(opened, date(2025, 2, 25), notifier=notifier)
        assert notifier.opened == []

    def test_transition_is_logged(self, draft, caplog):
        """Successful transitions are logged at INFO."""
        with caplog.at_level(logging.INFO, logger="wardroster.lifecycle.lifecycle"):
            open_request(draft, date(2025, 2, 25))
        assert "draft -> open" in caplog.text

    def test_rejected_transition_is_logged(self, draft, caplog):
        """Rejected transitions are logged at WARNING."""
        with caplog.at_level(logging.WARNING, logger="wardroster.lifecycle.lifecycle"):
            with pytest.raises(InvalidTransition):
                lock_request(draft)
        assert any(r.levelno == logging.WARNING for r in caplog.records)


class TestWritePermission:
    """Tests for who may write wishes in which state."""

    @pytest.fixture
    def opened(self, draft):
        """Open request editable from Feb 10 to Feb 25."""
        return open_request(
            draft, close_date=date(2025, 2, 25), open_date=date(2025, 2, 10)
        )

    @pytest.fixture
    def participant(self):
        return WriterCapabilities()

    @pytest.fixture
    def admin(self):
        return WriterCapabilities(admin_override=True)

    def test_participant_inside_window(self, opened, participant):
        """Participants write while open and inside the window."""
        assert can_write(opened, participant, date(2025, 2, 10))
        assert can_write(opened, participant, date(2025, 2, 25))

    def test_participant_outside_window(self, opened, participant):
        """Dates before or after the window are rejected."""
        assert isinstance(
            write_denial(opened, participant, date(2025, 2, 9)), RequestNotOpen
        )
        assert isinstance(
            write_denial(opened, participant, date(2025, 2, 26)), RequestNotOpen
        )

    def test_participant_cannot_write_draft_or_closed(self, draft, opened, participant):
        """Participants write only while open."""
        today = date(2025, 2, 15)
        assert isinstance(write_denial(draft, participant, today), RequestNotOpen)
        assert isinstance(
            write_denial(close_request(opened), participant, today), RequestNotOpen
        )

    def test_locked_rejects_everyone(self, opened, participant, admin):
        """A locked request rejects both participants and overrides."""
        locked = lock_request(opened)
        today = date(2025, 2, 15)
        assert isinstance(write_denial(locked, participant, today), RequestLocked)
        assert isinstance(write_denial(locked, admin, today), RequestLocked)

    def test_admin_override_in_draft_and_open(self, draft, opened, admin):
        """Overrides write in draft or open regardless of date."""
        assert can_write(draft, admin, date(2030, 1, 1))
        assert can_write(opened, admin, date(2030, 1, 1))

    def test_admin_override_not_when_closed(self, opened, admin):
        """Overrides never write once closed."""
        closed = close_request(opened)
        assert isinstance(write_denial(closed, admin, date(2025, 2, 15)), RequestNotOpen)

    def test_ensure_writable_raises(self, opened, participant):
        """ensure_writable turns a denial into an exception."""
        ensure_writable(opened, participant, date(2025, 2, 15))
        with pytest.raises(RequestLocked):
            ensure_writable(lock_request(opened), participant, date(2025, 2, 15))
        with pytest.raises(RequestNotOpen):
            ensure_writable(opened, participant, date(2025, 3, 1))
