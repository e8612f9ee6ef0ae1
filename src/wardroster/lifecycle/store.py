"""Persistence interface the engine reads from and writes through.

The engine itself performs no I/O. Implementations of ``SubmissionStore``
must give at most one writer per (unit, year, month) for lifecycle
transitions and per (unit, year, month, staff) for wish-set commits, by
way of conditional writes.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Optional

from wardroster.domain.models import PreScheduleRequest, RequestStatus, WishSet
from wardroster.errors import ConcurrentModification

RequestKey = tuple[str, int, int]


class SubmissionStore(ABC):
    """Abstract store of pre-schedule requests and wish sets."""

    @abstractmethod
    def get_request(self, key: RequestKey) -> PreScheduleRequest:
        """Return the request for (unit, year, month); KeyError when missing."""
        pass

    @abstractmethod
    def create_request(self, request: PreScheduleRequest) -> None:
        """Store a new request; ConcurrentModification if one exists."""
        pass

    @abstractmethod
    def save_request(
        self,
        request: PreScheduleRequest,
        expected_status: RequestStatus,
    ) -> None:
        """Replace the stored request only if its status is still ``expected_status``."""
        pass

    @abstractmethod
    def get_wish_set(self, key: RequestKey, staff_id: str) -> Optional[WishSet]:
        pass

    @abstractmethod
    def list_wish_sets(self, key: RequestKey) -> list[WishSet]:
        pass

    @abstractmethod
    def wish_set_version(self, key: RequestKey, staff_id: str) -> int:
        """Commit counter of a staff member's wish set (0 if never committed)."""
        pass

    @abstractmethod
    def commit_wish_set(
        self,
        key: RequestKey,
        wish_set: WishSet,
        expected_version: int,
    ) -> int:
        """Store a wish set if its version is unchanged; return the new version."""
        pass


class InMemorySubmissionStore(SubmissionStore):
    """Thread-safe dictionary-backed store.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._requests: dict[RequestKey, PreScheduleRequest] = {}
        self._wish_sets: dict[RequestKey, dict[str, tuple[int, WishSet]]] = {}

    def get_request(self, key: RequestKey) -> PreScheduleRequest:
        with self._lock:
            return copy.deepcopy(self._requests[key])

    def create_request(self, request: PreScheduleRequest) -> None:
        with self._lock:
            existing = self._requests.get(request.key)
            if existing is not None:
                raise ConcurrentModification(request.key, None, existing.status)
            self._requests[request.key] = copy.deepcopy(request)

    def save_request(
        self,
        request: PreScheduleRequest,
        expected_status: RequestStatus,
    ) -> None:
        with self._lock:
            current = self._requests.get(request.key)
            actual = current.status if current is not None else None
            if actual is not expected_status:
                raise ConcurrentModification(request.key, expected_status, actual)
            self._requests[request.key] = copy.deepcopy(request)

    def get_wish_set(self, key: RequestKey, staff_id: str) -> Optional[WishSet]:
        with self._lock:
            entry = self._wish_sets.get(key, {}).get(staff_id)
            return copy.deepcopy(entry[1]) if entry else None

    def list_wish_sets(self, key: RequestKey) -> list[WishSet]:
        with self._lock:
            return [copy.deepcopy(ws) for _, ws in self._wish_sets.get(key, {}).values()]

    def wish_set_version(self, key: RequestKey, staff_id: str) -> int:
        with self._lock:
            entry = self._wish_sets.get(key, {}).get(staff_id)
            return entry[0] if entry else 0

    def commit_wish_set(
        self,
        key: RequestKey,
        wish_set: WishSet,
        expected_version: int,
    ) -> int:
        with self._lock:
            per_request = self._wish_sets.setdefault(key, {})
            entry = per_request.get(wish_set.staff_id)
            actual = entry[0] if entry else 0
            if actual != expected_version:
                raise ConcurrentModification(
                    key + (wish_set.staff_id,), expected_version, actual
                )
            per_request[wish_set.staff_id] = (actual + 1, copy.deepcopy(wish_set))
            return actual + 1
