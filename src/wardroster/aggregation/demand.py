"""Aggregation of staff wishes into per-day demand counts.

The aggregate is advisory: it shows submitters and schedulers how many
people currently wish for each shift on each date, and whether that meets
the configured headcount. It never rejects a submission.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from wardroster.domain.models import PreScheduleRequest, ShiftCatalog, WishSet
from wardroster.errors import DateOutsideMonth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemandCoverage:
    """Wished headcount against required headcount for one date and shift."""

    day: date
    code: str
    required: int
    wished: int

    @property
    def met(self) -> bool:
        return self.wished >= self.required

    @property
    def gap(self) -> int:
        """Missing headcount (0 when met)."""
        return max(0, self.required - self.wished)


@dataclass
class AggregateDemand:
    """Per-date, per-shift counts of wishes for one pre-schedule.

    Attributes:
        year: Target year.
        month: Target month.
        counts: Date -> shift code -> number of staff wishing for it.
        demand_by_date: Required headcount copied from the request.
        participant_count: Number of participants on the request.
        reserved_staff_per_day: Headcount the scheduler holds back daily.
        rest_codes: Codes meaning "off" for capacity checks.
    """

    year: int
    month: int
    counts: dict[date, dict[str, int]] = field(default_factory=dict)
    demand_by_date: dict[date, dict[str, int]] = field(default_factory=dict)
    participant_count: int = 0
    reserved_staff_per_day: int = 0
    rest_codes: frozenset[str] = frozenset()

    def count(self, day: date, code: str) -> int:
        return self.counts.get(day, {}).get(code, 0)

    def required(self, day: date, code: str) -> int:
        return self.demand_by_date.get(day, {}).get(code, 0)

    def met(self, day: date, code: str) -> bool:
        """Whether wishes for ``code`` on ``day`` reach the required headcount."""
        return self.count(day, code) >= self.required(day, code)

    def coverage(self) -> list[DemandCoverage]:
        """Coverage for every configured (date, shift) requirement, by date."""
        result = []
        for day in sorted(self.demand_by_date):
            for code, required in self.demand_by_date[day].items():
                result.append(
                    DemandCoverage(day=day, code=code, required=required,
                                   wished=self.count(day, code))
                )
        return result

    def unmet(self) -> list[DemandCoverage]:
        return [c for c in self.coverage() if not c.met]

    def off_count(self, day: date) -> int:
        """Number of rest wishes on a date."""
        return sum(self.count(day, code) for code in self.rest_codes)

    def off_capacity(self, day: date) -> int:
        """How many participants can be off on ``day`` and still staff it."""
        required = sum(self.demand_by_date.get(day, {}).values())
        return max(0, self.participant_count - required - self.reserved_staff_per_day)

    def over_capacity_dates(self) -> list[date]:
        """Dates where rest wishes exceed the off capacity."""
        return [
            day for day in sorted(self.counts)
            if self.off_count(day) > self.off_capacity(day)
        ]

    def to_dict(self) -> dict:
        return {
            day.isoformat(): dict(codes)
            for day, codes in sorted(self.counts.items())
        }


@dataclass
class SubmissionProgress:
    """Who has and has not submitted wishes for a pre-schedule."""

    submitted: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    non_participants: list[str] = field(default_factory=list)

    @property
    def completion_rate(self) -> float:
        """Percentage of participants who submitted (100 when none)."""
        total = len(self.submitted) + len(self.pending)
        return len(self.submitted) / total * 100 if total else 100.0


class DemandAggregator:
    """Rolls up wish sets into an AggregateDemand.

    Example:
        >>> aggregator = DemandAggregator()
        >>> demand = aggregator.aggregate(accepted, request, provisional=my_draft)
        >>> demand.met(date(2025, 3, 1), "N")
        False
    """

    def __init__(self, catalog: Optional[ShiftCatalog] = None):
        self.catalog = catalog or ShiftCatalog.default()

    def aggregate(
        self,
        accepted: Iterable[WishSet],
        request: PreScheduleRequest,
        provisional: Optional[WishSet] = None,
    ) -> AggregateDemand:
        """Count wishes per date and shift code.

        A provisional wish set replaces its owner's accepted one so that every
        participant is counted once.

        Args:
            accepted: Wish sets already accepted for the request.
            request: The pre-schedule request supplying required headcount.
            provisional: Wish set being edited, previewed on top of the rest.

        Returns:
            AggregateDemand with counts for every code that appears.
        """
        by_staff: dict[str, WishSet] = {}
        for wish_set in accepted:
            by_staff[wish_set.staff_id] = wish_set
        if provisional is not None:
            by_staff[provisional.staff_id] = provisional

        counts: dict[date, dict[str, int]] = {}
        for staff_id in sorted(by_staff):
            for day, code in by_staff[staff_id].sorted_wishes():
                if not request.contains(day):
                    raise DateOutsideMonth(day)
                day_counts = counts.setdefault(day, {})
                day_counts[code] = day_counts.get(code, 0) + 1

        logger.debug(
            "Aggregated %d wish sets for %s/%04d-%02d",
            len(by_staff), request.unit_id, request.year, request.month,
        )

        return AggregateDemand(
            year=request.year,
            month=request.month,
            counts={day: counts[day] for day in sorted(counts)},
            demand_by_date={d: dict(c) for d, c in request.demand_by_date.items()},
            participant_count=len(request.participants),
            reserved_staff_per_day=request.reserved_staff_per_day,
            rest_codes=frozenset(self.catalog.rest_codes),
        )


def compute_aggregate_demand(
    accepted: Iterable[WishSet],
    request: PreScheduleRequest,
    provisional: Optional[WishSet] = None,
    catalog: Optional[ShiftCatalog] = None,
) -> AggregateDemand:
    """Aggregate with a default aggregator. See DemandAggregator.aggregate."""
    return DemandAggregator(catalog).aggregate(accepted, request, provisional)


def submission_progress(
    request: PreScheduleRequest,
    wish_sets: Iterable[WishSet],
) -> SubmissionProgress:
    """Split participants into submitted and pending."""
    owners = {ws.staff_id for ws in wish_sets}
    participants = set(request.participants)
    return SubmissionProgress(
        submitted=sorted(participants & owners),
        pending=sorted(participants - owners),
        non_participants=sorted(owners - participants),
    )
