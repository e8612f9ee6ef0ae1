"""Store-backed orchestration of the pre-schedule engine.

The engine functions are pure; this service reads snapshots from a
``SubmissionStore``, runs them, and writes results back with conditional
writes so that two concurrent writers cannot both succeed.
"""

import logging
from datetime import date
from typing import Callable, Optional

from wardroster.aggregation.demand import (
    AggregateDemand,
    DemandAggregator,
    SubmissionProgress,
    submission_progress,
)
from wardroster.domain.models import PreScheduleRequest, WishSet, WriterCapabilities
from wardroster.lifecycle.lifecycle import (
    Notifier,
    close_request,
    lock_request,
    open_request,
    reopen_request,
)
from wardroster.lifecycle.store import RequestKey, SubmissionStore
from wardroster.validation.validator import ValidationResult, WishValidator

logger = logging.getLogger(__name__)


class PreScheduleService:
    """Applies lifecycle transitions and wish submissions through a store.

    Example:
        >>> service = PreScheduleService(InMemorySubmissionStore())
        >>> service.create(request)
        >>> service.open(request.key, close_date=date(2025, 2, 20))
        >>> result = service.submit(request.key, wish_set, WriterCapabilities())
    """

    def __init__(
        self,
        store: SubmissionStore,
        validator: Optional[WishValidator] = None,
        aggregator: Optional[DemandAggregator] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.store = store
        self.validator = validator or WishValidator()
        self.aggregator = aggregator or DemandAggregator(self.validator.catalog)
        self.notifier = notifier

    def create(self, request: PreScheduleRequest) -> None:
        self.store.create_request(request)
        logger.info(
            "Created pre-schedule %s/%04d-%02d",
            request.unit_id, request.year, request.month,
        )

    def _apply(
        self,
        key: RequestKey,
        operation: Callable[[PreScheduleRequest], PreScheduleRequest],
    ) -> PreScheduleRequest:
        current = self.store.get_request(key)
        updated = operation(current)
        self.store.save_request(updated, expected_status=current.status)
        return updated

    def open(
        self,
        key: RequestKey,
        close_date: date,
        open_date: Optional[date] = None,
    ) -> PreScheduleRequest:
        return self._apply(
            key,
            lambda r: open_request(r, close_date, notifier=self.notifier, open_date=open_date),
        )

    def close(self, key: RequestKey) -> PreScheduleRequest:
        return self._apply(key, close_request)

    def reopen(self, key: RequestKey, close_date: Optional[date] = None) -> PreScheduleRequest:
        return self._apply(key, lambda r: reopen_request(r, close_date))

    def lock(self, key: RequestKey) -> PreScheduleRequest:
        return self._apply(key, lock_request)

    def submit(
        self,
        key: RequestKey,
        wish_set: WishSet,
        capabilities: WriterCapabilities,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Validate a wish set and commit it when every rule passes.

        The commit is conditional on the staff member's wish-set version
        read before validation.

        Raises:
            ConcurrentModification: If another commit for the same staff
                member landed in between.
        """
        version = self.store.wish_set_version(key, wish_set.staff_id)
        request = self.store.get_request(key)

        result = self.validator.validate(wish_set, request, capabilities, today)
        if not result.is_valid:
            return result

        new_version = self.store.commit_wish_set(key, wish_set, expected_version=version)
        logger.info(
            "Committed wishes of %s for %s/%04d-%02d (version %d)",
            wish_set.staff_id, request.unit_id, request.year, request.month, new_version,
        )
        return result

    def preview_demand(
        self,
        key: RequestKey,
        provisional: Optional[WishSet] = None,
    ) -> AggregateDemand:
        """Aggregate committed wishes, with an uncommitted set previewed on top."""
        request = self.store.get_request(key)
        return self.aggregator.aggregate(self.store.list_wish_sets(key), request, provisional)

    def progress(self, key: RequestKey) -> SubmissionProgress:
        request = self.store.get_request(key)
        return submission_progress(request, self.store.list_wish_sets(key))
