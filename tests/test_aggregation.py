"""Tests for demand aggregation."""

from datetime import date

import pytest

from wardroster.aggregation import (
    DemandAggregator,
    compute_aggregate_demand,
    submission_progress,
)
from wardroster.domain.models import PreScheduleRequest, WishSet
from wardroster.errors import DateOutsideMonth

D1 = date(2025, 3, 3)
D2 = date(2025, 3, 4)


def wish_set(staff_id, wishes):
    return WishSet(staff_id=staff_id, year=2025, month=3, wishes=wishes)


@pytest.fixture
def request_():
    """Request needing one N on D1 and two D on D2, four participants."""
    return PreScheduleRequest(
        unit_id="ward-7",
        year=2025,
        month=3,
        demand_by_date={D1: {"N": 1}, D2: {"D": 2}},
        participants={"s1": "A", "s2": "A", "s3": "B", "s4": "B"},
    )


@pytest.fixture
def accepted():
    return [
        wish_set("s1", {D1: "N", D2: "D"}),
        wish_set("s2", {D1: "OFF", D2: "D"}),
        wish_set("s3", {D1: "OFF", D2: "NO_N"}),
    ]


class TestAggregate:
    """Tests for per-day wish counts."""

    def test_counts_every_code(self, accepted, request_):
        """Every code is counted under its own key, rest codes included."""
        demand = compute_aggregate_demand(accepted, request_)

        assert demand.counts == {
            D1: {"N": 1, "OFF": 2},
            D2: {"D": 2, "NO_N": 1},
        }
        assert demand.count(D1, "OFF") == 2
        assert demand.count(D1, "E") == 0

    def test_met_flags(self, accepted, request_):
        """met compares wish counts with the required headcount."""
        demand = compute_aggregate_demand(accepted, request_)
        assert demand.met(D1, "N")
        assert demand.met(D2, "D")
        # Nothing required means trivially met
        assert demand.met(D1, "D")

    def test_unmet_requirement(self, request_):
        """A requirement with too few wishes is reported as unmet."""
        demand = compute_aggregate_demand([wish_set("s1", {D2: "D"})], request_)

        assert not demand.met(D2, "D")
        unmet = demand.unmet()
        assert [(c.day, c.code, c.required, c.wished, c.gap) for c in unmet] == [
            (D1, "N", 1, 0, 1),
            (D2, "D", 2, 1, 1),
        ]

    def test_provisional_is_counted(self, accepted, request_):
        """A provisional wish set from a new submitter is added."""
        provisional = wish_set("s4", {D1: "N"})
        demand = compute_aggregate_demand(accepted, request_, provisional)
        assert demand.count(D1, "N") == 2

    def test_provisional_replaces_own_accepted(self, accepted, request_):
        """Editing one's own wishes previews them in place of the committed set."""
        provisional = wish_set("s1", {D1: "OFF"})
        demand = compute_aggregate_demand(accepted, request_, provisional)

        assert demand.count(D1, "N") == 0
        assert demand.count(D1, "OFF") == 3
        assert demand.count(D2, "D") == 1

    def test_missing_dates_not_counted(self, request_):
        """Only explicit wishes are counted."""
        demand = compute_aggregate_demand([wish_set("s1", {D1: "D"})], request_)
        assert demand.counts == {D1: {"D": 1}}

    def test_pure_function(self, accepted, request_):
        """Identical inputs produce identical output."""
        first = compute_aggregate_demand(accepted, request_)
        second = compute_aggregate_demand(accepted, request_)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_inputs_unchanged(self, accepted, request_):
        """Aggregation does not touch the wish sets."""
        compute_aggregate_demand(accepted, request_)
        assert accepted[0].wishes == {D1: "N", D2: "D"}

    def test_out_of_month_wish_raises(self, request_):
        """A wish outside the month fails fast."""
        with pytest.raises(DateOutsideMonth):
            compute_aggregate_demand([wish_set("s1", {date(2025, 4, 1): "D"})], request_)

    def test_to_dict_uses_iso_dates(self, accepted, request_):
        """to_dict keys are ISO dates in order."""
        data = compute_aggregate_demand(accepted, request_).to_dict()
        assert list(data) == ["2025-03-03", "2025-03-04"]

    def test_aggregator_counts_are_date_ordered(self, request_):
        """Counts come back sorted by date whatever the input order."""
        unordered = wish_set("s1", {D2: "D", D1: "N"})
        demand = DemandAggregator().aggregate([unordered], request_)
        assert list(demand.counts) == [D1, D2]


class TestOffCapacity:
    """Tests for the off-capacity advisory."""

    def test_capacity(self, request_):
        """Capacity is participants minus required headcount minus reserve."""
        request_.reserved_staff_per_day = 1
        demand = compute_aggregate_demand([], request_)

        assert demand.off_capacity(D1) == 4 - 1 - 1
        assert demand.off_capacity(D2) == 4 - 2 - 1
        assert demand.off_capacity(date(2025, 3, 5)) == 3

    def test_capacity_never_negative(self, request_):
        request_.reserved_staff_per_day = 10
        assert compute_aggregate_demand([], request_).off_capacity(D1) == 0

    def test_over_capacity_dates(self, request_):
        """Dates with more rest wishes than capacity are listed."""
        wish_sets = [
            wish_set("s1", {D2: "OFF"}),
            wish_set("s2", {D2: "FF"}),
            wish_set("s3", {D2: "OFF", D1: "OFF"}),
        ]
        demand = compute_aggregate_demand(wish_sets, request_)

        assert demand.off_count(D2) == 3
        assert demand.over_capacity_dates() == [D2]

    def test_manager_off_uses_capacity(self, request_):
        """Manager-designated offs take up off capacity like rest wishes."""
        wish_sets = [
            wish_set("s1", {D2: "M_OFF"}),
            wish_set("s2", {D2: "OFF"}),
            wish_set("s3", {D2: "OFF"}),
        ]
        demand = compute_aggregate_demand(wish_sets, request_)

        assert demand.off_count(D2) == 3
        assert demand.over_capacity_dates() == [D2]


class TestSubmissionProgress:
    """Tests for submission progress."""

    def test_progress(self, accepted, request_):
        """Participants are split into submitted and pending."""
        extra = wish_set("x9", {})
        progress = submission_progress(request_, accepted + [extra])

        assert progress.submitted == ["s1", "s2", "s3"]
        assert progress.pending == ["s4"]
        assert progress.non_participants == ["x9"]
        assert progress.completion_rate == 75.0

    def test_no_participants(self):
        """An empty participant list counts as complete."""
        request = PreScheduleRequest(unit_id="ward-7", year=2025, month=3)
        assert submission_progress(request, []).completion_rate == 100.0
