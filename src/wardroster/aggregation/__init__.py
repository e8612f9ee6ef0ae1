"""Roll-up of staff wishes into demand counts."""

from wardroster.aggregation.demand import (
    AggregateDemand,
    DemandAggregator,
    DemandCoverage,
    SubmissionProgress,
    compute_aggregate_demand,
    submission_progress,
)

__all__ = [
    "AggregateDemand",
    "DemandAggregator",
    "DemandCoverage",
    "SubmissionProgress",
    "compute_aggregate_demand",
    "submission_progress",
]
