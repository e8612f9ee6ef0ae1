"""Domain models and business rules for pre-scheduling."""

from wardroster.domain.calendar import HolidayCalendar, HolidayEntry
from wardroster.domain.models import (
    DEFAULT_SHIFTS,
    CalendarDay,
    GridStatus,
    GroupLimit,
    PreScheduleRequest,
    RequestStatus,
    ScheduleGrid,
    ShiftCatalog,
    ShiftDefinition,
    WishPreferences,
    WishSet,
    WriterCapabilities,
    month_dates,
    prior_month_tail,
)
from wardroster.domain.policies import (
    DefaultNightShiftPolicy,
    DefaultPriorityPolicy,
    DefaultWishCodePolicy,
    NightShiftPolicy,
    PriorityPolicy,
    WishCodePolicy,
)

__all__ = [
    # Models
    "CalendarDay",
    "DEFAULT_SHIFTS",
    "GridStatus",
    "GroupLimit",
    "PreScheduleRequest",
    "RequestStatus",
    "ScheduleGrid",
    "ShiftCatalog",
    "ShiftDefinition",
    "WishPreferences",
    "WishSet",
    "WriterCapabilities",
    "month_dates",
    "prior_month_tail",
    # Calendar
    "HolidayCalendar",
    "HolidayEntry",
    # Policies
    "DefaultNightShiftPolicy",
    "DefaultPriorityPolicy",
    "DefaultWishCodePolicy",
    "NightShiftPolicy",
    "PriorityPolicy",
    "WishCodePolicy",
]
