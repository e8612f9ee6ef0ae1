"""Tests for the submission store and the pre-schedule service."""

import threading
from datetime import date

import pytest

from wardroster.domain.calendar import HolidayCalendar
from wardroster.domain.models import (
    PreScheduleRequest,
    RequestStatus,
    WishPreferences,
    WishSet,
    WriterCapabilities,
)
from wardroster.errors import ConcurrentModification, InvalidTransition
from wardroster.lifecycle import InMemorySubmissionStore, Notifier, open_request
from wardroster.service import PreScheduleService
from wardroster.validation import ValidationErrorType, WishValidator

KEY = ("ward-7", 2025, 3)
TODAY = date(2025, 2, 20)


@pytest.fixture
def request_():
    return PreScheduleRequest(
        unit_id="ward-7",
        year=2025,
        month=3,
        demand_by_date={date(2025, 3, 3): {"D": 1}},
        participants={"s1": "senior", "s2": "junior"},
    )


def wish_set(staff_id, wishes=None, p1="D", p2=""):
    return WishSet(
        staff_id=staff_id,
        year=2025,
        month=3,
        wishes=wishes or {},
        preferences=WishPreferences(priority1=p1, priority2=p2),
    )


class TestInMemorySubmissionStore:
    """Tests for InMemorySubmissionStore."""

    @pytest.fixture
    def store(self, request_):
        store = InMemorySubmissionStore()
        store.create_request(request_)
        return store

    def test_get_missing_request(self):
        with pytest.raises(KeyError):
            InMemorySubmissionStore().get_request(KEY)

    def test_create_twice(self, store, request_):
        with pytest.raises(ConcurrentModification):
            store.create_request(request_)

    def test_values_are_copied(self, store):
        """Changing a returned request does not change the stored one."""
        fetched = store.get_request(KEY)
        fetched.max_off_days = 0
        assert store.get_request(KEY).max_off_days == 8

    def test_conditional_status_write(self, store, request_):
        """A save succeeds only from the expected prior status."""
        opened = open_request(request_, date(2025, 2, 25))
        store.save_request(opened, expected_status=RequestStatus.DRAFT)
        assert store.get_request(KEY).status is RequestStatus.OPEN

        with pytest.raises(ConcurrentModification) as exc_info:
            store.save_request(opened, expected_status=RequestStatus.DRAFT)
        assert exc_info.value.actual is RequestStatus.OPEN

    def test_wish_set_versions(self, store):
        """Each commit bumps the version; stale commits are rejected."""
        assert store.wish_set_version(KEY, "s1") == 0
        assert store.commit_wish_set(KEY, wish_set("s1"), expected_version=0) == 1
        assert store.commit_wish_set(KEY, wish_set("s1"), expected_version=1) == 2

        with pytest.raises(ConcurrentModification):
            store.commit_wish_set(KEY, wish_set("s1"), expected_version=1)

    def test_list_wish_sets(self, store):
        store.commit_wish_set(KEY, wish_set("s1"), expected_version=0)
        store.commit_wish_set(KEY, wish_set("s2"), expected_version=0)
        assert sorted(ws.staff_id for ws in store.list_wish_sets(KEY)) == ["s1", "s2"]
        assert store.get_wish_set(KEY, "s3") is None

    def test_one_writer_wins(self, store):
        """Concurrent commits from the same version: exactly one succeeds."""
        results = []
        barrier = threading.Barrier(8)

        def commit():
            barrier.wait()
            try:
                results.append(store.commit_wish_set(KEY, wish_set("s1"), expected_version=0))
            except ConcurrentModification:
                results.append(None)

        threads = [threading.Thread(target=commit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(1) == 1
        assert results.count(None) == 7


class RecordingNotifier(Notifier):
    def __init__(self):
        self.opened = []

    def pre_schedule_opened(self, request):
        self.opened.append(request.key)


class TestPreScheduleService:
    """Tests for PreScheduleService."""

    @pytest.fixture
    def notifier(self):
        return RecordingNotifier()

    @pytest.fixture
    def service(self, request_, notifier):
        service = PreScheduleService(
            InMemorySubmissionStore(),
            validator=WishValidator(calendar=HolidayCalendar()),
            notifier=notifier,
        )
        service.create(request_)
        return service

    def test_lifecycle_through_store(self, service, notifier):
        """Transitions are persisted and the open is announced."""
        service.open(KEY, close_date=date(2025, 2, 25), open_date=date(2025, 2, 10))
        assert service.store.get_request(KEY).status is RequestStatus.OPEN
        assert notifier.opened == [KEY]

        service.close(KEY)
        service.reopen(KEY, close_date=date(2025, 2, 27))
        assert service.store.get_request(KEY).close_date == date(2025, 2, 27)

        service.lock(KEY)
        assert service.store.get_request(KEY).status is RequestStatus.LOCKED

    def test_invalid_transition_not_persisted(self, service):
        with pytest.raises(InvalidTransition):
            service.lock(KEY)
        assert service.store.get_request(KEY).status is RequestStatus.DRAFT

    def test_submit_commits_valid(self, service):
        """A valid submission is committed."""
        service.open(KEY, close_date=date(2025, 2, 25))
        result = service.submit(KEY, wish_set("s1", {date(2025, 3, 3): "D"}),
                                WriterCapabilities(), TODAY)

        assert result.is_valid
        assert service.store.wish_set_version(KEY, "s1") == 1
        assert service.store.get_wish_set(KEY, "s1").wishes == {date(2025, 3, 3): "D"}

    def test_submit_rejects_invalid(self, service):
        """A rejected submission is not committed."""
        service.open(KEY, close_date=date(2025, 2, 25))
        result = service.submit(KEY, wish_set("s1", p1="E", p2="N"), WriterCapabilities(), TODAY)

        assert result.error_types == [ValidationErrorType.NIGHT_TYPES_COMBINED]
        assert service.store.wish_set_version(KEY, "s1") == 0

    def test_submit_after_lock(self, service):
        """Once locked, submissions are rejected."""
        service.open(KEY, close_date=date(2025, 2, 25))
        service.close(KEY)
        service.lock(KEY)
        result = service.submit(KEY, wish_set("s1"), WriterCapabilities(), TODAY)
        assert result.error_types == [ValidationErrorType.REQUEST_LOCKED]

    def test_preview_and_progress(self, service):
        """Preview layers an uncommitted set over committed ones."""
        service.open(KEY, close_date=date(2025, 2, 25))
        service.submit(KEY, wish_set("s1", {date(2025, 3, 3): "OFF"}), WriterCapabilities(), TODAY)

        demand = service.preview_demand(KEY, provisional=wish_set("s2", {date(2025, 3, 3): "D"}))
        assert demand.count(date(2025, 3, 3), "OFF") == 1
        assert demand.met(date(2025, 3, 3), "D")

        progress = service.progress(KEY)
        assert progress.submitted == ["s1"]
        assert progress.pending == ["s2"]
