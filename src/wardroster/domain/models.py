"""Domain models for the pre-schedule engine.

This module contains the core data structures shared by every component:
the unit's shift catalog, the monthly pre-schedule request, staff wish sets
and the finalized assignment grid.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from wardroster.errors import DateOutsideMonth, UnknownShiftCode


class RequestStatus(Enum):
    """Lifecycle status of a unit-month pre-schedule request."""

    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"


class GridStatus(Enum):
    """Publication status of a finalized schedule grid."""

    DRAFT = "draft"
    PUBLISHED = "published"


def month_dates(year: int, month: int) -> list[date]:
    """Return every calendar date of a month in ascending order."""
    num_days = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, num_days + 1)]


def prior_month_tail(year: int, month: int, days: int = 6) -> list[date]:
    """Return the trailing ``days`` dates of the month before ``year``/``month``."""
    first = date(year, month, 1)
    return [first - timedelta(days=offset) for offset in range(days, 0, -1)]


@dataclass(frozen=True)
class ShiftDefinition:
    """A shift code configured for a unit.

    Attributes:
        code: Short opaque code (e.g. "D", "N", "OFF").
        name: Human-readable name.
        is_rest_code: True for codes that mean "no shift worked".
        counts_toward_stats: Whether the code appears in distribution reports.
        sort_order: Display and catalog ordering.
    """

    code: str
    name: str = ""
    is_rest_code: bool = False
    counts_toward_stats: bool = True
    sort_order: int = 0

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "is_rest_code": self.is_rest_code,
            "counts_toward_stats": self.counts_toward_stats,
            "sort_order": self.sort_order,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShiftDefinition":
        valid = {"code", "name", "is_rest_code", "counts_toward_stats", "sort_order"}
        return cls(**{k: v for k, v in data.items() if k in valid})


DEFAULT_SHIFTS = (
    ShiftDefinition("D", "Day", sort_order=1),
    ShiftDefinition("E", "Evening", sort_order=2),
    ShiftDefinition("N", "Night", sort_order=3),
    ShiftDefinition("OFF", "Off duty", is_rest_code=True, sort_order=10),
    # Legacy alias of OFF kept for older grids
    ShiftDefinition("FF", "Off duty (legacy)", is_rest_code=True,
                    counts_toward_stats=False, sort_order=11),
    # Manager-designated off; only an administrative override writes it
    ShiftDefinition("M_OFF", "Manager-designated off", is_rest_code=True,
                    counts_toward_stats=False, sort_order=12),
)


class ShiftCatalog:
    """Ordered, closed set of shift codes for one unit configuration.

    Every shift value crossing the engine boundary is checked against the
    catalog so that an unrecognized code fails fast instead of being
    treated as a worked shift.

    Example:
        >>> catalog = ShiftCatalog.default()
        >>> catalog.is_rest("OFF")
        True
        >>> catalog.rest_code
        'OFF'
    """

    def __init__(self, definitions: Iterable[ShiftDefinition]):
        ordered = sorted(definitions, key=lambda d: (d.sort_order, d.code))
        self._definitions: dict[str, ShiftDefinition] = {}
        for definition in ordered:
            if definition.code in self._definitions:
                raise ValueError(f"Duplicate shift code: {definition.code!r}")
            self._definitions[definition.code] = definition
        if not any(d.is_rest_code for d in ordered):
            raise ValueError("Shift catalog needs at least one rest code")

    @classmethod
    def default(cls) -> "ShiftCatalog":
        """Catalog with D/E/N worked shifts and the OFF/FF/M_OFF rest codes."""
        return cls(DEFAULT_SHIFTS)

    def __contains__(self, code: object) -> bool:
        return code in self._definitions

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def codes(self) -> list[str]:
        """All codes in catalog order."""
        return list(self._definitions)

    @property
    def work_codes(self) -> list[str]:
        return [d.code for d in self if not d.is_rest_code]

    @property
    def rest_codes(self) -> list[str]:
        return [d.code for d in self if d.is_rest_code]

    @property
    def rest_code(self) -> str:
        """The primary rest code (first rest code in catalog order)."""
        return self.rest_codes[0]

    @property
    def stats_codes(self) -> list[str]:
        """Codes that count toward distribution statistics."""
        return [d.code for d in self if d.counts_toward_stats]

    def get(self, code: str) -> ShiftDefinition:
        """Look up a definition, raising UnknownShiftCode when absent."""
        try:
            return self._definitions[code]
        except KeyError:
            raise UnknownShiftCode(code) from None

    def is_rest(self, code: str) -> bool:
        return self.get(code).is_rest_code

    def sort_key(self, code: str) -> tuple[int, str]:
        definition = self._definitions.get(code)
        if definition is None:
            return (10**6, code)
        return (definition.sort_order, code)

    def to_list(self) -> list[dict]:
        return [d.to_dict() for d in self]


@dataclass(frozen=True)
class CalendarDay:
    """A single day of a month as seen by the scheduling calendar."""

    date: date
    weekday: int  # 0=Monday ... 6=Sunday
    is_holiday: bool = False


@dataclass
class GroupLimit:
    """Per-shift headcount bounds for one staff group.

    Attributes:
        min_per_shift: Minimum group members required on each shift code.
        max_per_shift: Maximum group members allowed on each shift code.
    """

    min_per_shift: dict[str, int] = field(default_factory=dict)
    max_per_shift: dict[str, int] = field(default_factory=dict)


@dataclass
class PreScheduleRequest:
    """The pre-schedule request of one unit for one month.

    Attributes:
        unit_id: Owning unit.
        year: Target year.
        month: Target month (1-12).
        status: Current lifecycle status.
        open_date: First day participants may edit (inclusive).
        close_date: Last day participants may edit (inclusive).
        max_off_days: Maximum rest-code wishes per participant.
        max_holiday: Maximum rest-code wishes falling on holidays.
        shift_types_limit: Shift diversity limit for the month (2 or 3).
        allow_three_types_voluntary: Participants may opt into three shift types.
        reserved_staff_per_day: Headcount the scheduler holds back each day.
        group_limits: Per-group headcount bounds keyed by group label.
        demand_by_date: Required headcount per date and shift code.
        participants: Staff IDs mapped to their group label.
    """

    unit_id: str
    year: int
    month: int
    status: RequestStatus = RequestStatus.DRAFT
    open_date: Optional[date] = None
    close_date: Optional[date] = None
    max_off_days: int = 8
    max_holiday: int = 2
    shift_types_limit: int = 2
    allow_three_types_voluntary: bool = False
    reserved_staff_per_day: int = 0
    group_limits: dict[str, GroupLimit] = field(default_factory=dict)
    demand_by_date: dict[date, dict[str, int]] = field(default_factory=dict)
    participants: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        if self.shift_types_limit not in (2, 3):
            raise ValueError(
                f"shift_types_limit must be 2 or 3, got {self.shift_types_limit}"
            )
        for name in ("max_off_days", "max_holiday", "reserved_staff_per_day"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        for day in self.demand_by_date:
            if not self.contains(day):
                raise DateOutsideMonth(day)

    @property
    def key(self) -> tuple[str, int, int]:
        """Identity of the request: (unit, year, month)."""
        return (self.unit_id, self.year, self.month)

    @property
    def days(self) -> list[date]:
        return month_dates(self.year, self.month)

    def contains(self, day: date) -> bool:
        """Check whether a date belongs to the target month."""
        return day.year == self.year and day.month == self.month

    def is_participant(self, staff_id: str) -> bool:
        return staff_id in self.participants

    def group_of(self, staff_id: str) -> Optional[str]:
        return self.participants.get(staff_id)

    def required(self, day: date, code: str) -> int:
        """Required headcount for a shift on a date (0 when not configured)."""
        return self.demand_by_date.get(day, {}).get(code, 0)

    def required_total(self, day: date) -> int:
        return sum(self.demand_by_date.get(day, {}).values())


@dataclass
class WishPreferences:
    """Ordered shift-type preferences for the month.

    Empty strings (or None) mean "no preference" for that rank.
    """

    priority1: str = ""
    priority2: str = ""
    priority3: Optional[str] = None

    def selected(self) -> list[str]:
        """Non-empty priorities in rank order."""
        return [p for p in (self.priority1, self.priority2, self.priority3) if p]


@dataclass
class WishSet:
    """One participant's wishes for a pre-schedule month.

    Attributes:
        staff_id: Owner of the wishes.
        year: Target year.
        month: Target month.
        wishes: Explicitly requested shift code per date.
        notes: Free-text note to the scheduler.
        preferences: Shift-type priority order.
        batch_preference: Night code the participant wants to batch, if any.
    """

    staff_id: str
    year: int
    month: int
    wishes: dict[date, str] = field(default_factory=dict)
    notes: str = ""
    preferences: WishPreferences = field(default_factory=WishPreferences)
    batch_preference: Optional[str] = None

    def wish_for(self, day: date, rest_code: str = "OFF") -> str:
        """Wish for a date; dates without an explicit wish read as rest."""
        return self.wishes.get(day, rest_code)

    def count(self, codes: Iterable[str]) -> int:
        """Number of explicit wishes whose code is in ``codes``."""
        wanted = set(codes)
        return sum(1 for code in self.wishes.values() if code in wanted)

    def sorted_wishes(self) -> list[tuple[date, str]]:
        return sorted(self.wishes.items())


@dataclass(frozen=True)
class WriterCapabilities:
    """Capabilities of whoever is writing a wish set.

    Passed explicitly on every call; the engine never reads the current
    session or an impersonated identity from ambient state.

    Attributes:
        can_batch: Participant is eligible for a batch night-shift commitment.
        admin_override: Scheduler editing in administrative override mode.
    """

    can_batch: bool = False
    admin_override: bool = False


@dataclass
class ScheduleGrid:
    """Finalized assignment grid for a unit-month.

    Attributes:
        unit_id: Owning unit.
        year: Grid year.
        month: Grid month.
        assignments: Staff ID -> date -> shift code, dates within the month.
        carry_over: Staff ID -> date -> shift code for the trailing days of
            the prior month. Read-only context for consecutive runs.
        status: Draft or published.
    """

    unit_id: str
    year: int
    month: int
    assignments: dict[str, dict[date, str]] = field(default_factory=dict)
    carry_over: dict[str, dict[date, str]] = field(default_factory=dict)
    status: GridStatus = GridStatus.DRAFT
    carry_over_days: int = 6

    def __post_init__(self) -> None:
        for row in self.assignments.values():
            for day in row:
                if day.year != self.year or day.month != self.month:
                    raise DateOutsideMonth(day)
        allowed = set(prior_month_tail(self.year, self.month, self.carry_over_days))
        for row in self.carry_over.values():
            for day in row:
                if day not in allowed:
                    raise DateOutsideMonth(
                        day, f"Carry-over date {day} is not in the prior month tail"
                    )

    @property
    def days(self) -> list[date]:
        return month_dates(self.year, self.month)

    @property
    def staff_ids(self) -> list[str]:
        return list(self.assignments)

    def row(self, staff_id: str) -> dict[date, str]:
        return self.assignments.get(staff_id, {})

    def carry_over_row(self, staff_id: str) -> dict[date, str]:
        return self.carry_over.get(staff_id, {})

    def get_shift(self, staff_id: str, day: date) -> Optional[str]:
        return self.assignments.get(staff_id, {}).get(day)
