"""Statistics and completeness over finalized schedule grids."""

from wardroster.statistics.completeness import (
    CompletenessReport,
    GroupLimitViolation,
    ShortageRecord,
    assigned_headcount,
    check_group_limits,
    compute_completeness,
)
from wardroster.statistics.staff import (
    ConsecutiveRun,
    StaffStatistics,
    compute_staff_statistics,
)
from wardroster.statistics.unit import UnitStatistics, compute_unit_statistics

__all__ = [
    # Per staff
    "ConsecutiveRun",
    "StaffStatistics",
    "compute_staff_statistics",
    # Completeness
    "CompletenessReport",
    "GroupLimitViolation",
    "ShortageRecord",
    "assigned_headcount",
    "check_group_limits",
    "compute_completeness",
    # Unit
    "UnitStatistics",
    "compute_unit_statistics",
]
