"""Validation of staff wish sets.

This module is the single gate a wish set passes before it is accepted
into a pre-schedule. Every rule is evaluated in one pass and every
violation is reported, so a participant sees the complete correction list
at once rather than one problem per submission.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from wardroster.domain.calendar import HolidayCalendar
from wardroster.domain.models import (
    PreScheduleRequest,
    ShiftCatalog,
    WishSet,
    WriterCapabilities,
)
from wardroster.domain.policies import (
    DefaultNightShiftPolicy,
    DefaultPriorityPolicy,
    DefaultWishCodePolicy,
    NightShiftPolicy,
    PriorityPolicy,
    WishCodePolicy,
)
from wardroster.errors import RequestLocked
from wardroster.lifecycle.lifecycle import write_denial

logger = logging.getLogger(__name__)


class ValidationErrorType(Enum):
    """Rules a wish set can violate, in evaluation order."""

    REQUEST_LOCKED = "request_locked"
    REQUEST_NOT_OPEN = "request_not_open"
    NOT_A_PARTICIPANT = "not_a_participant"
    WRONG_MONTH = "wrong_month"
    DATE_OUTSIDE_MONTH = "date_outside_month"
    UNKNOWN_SHIFT_CODE = "unknown_shift_code"
    MANAGER_CODE_RESTRICTED = "manager_code_restricted"
    OFF_DAY_QUOTA_EXCEEDED = "off_day_quota_exceeded"
    HOLIDAY_OFF_QUOTA_EXCEEDED = "holiday_off_quota_exceeded"
    INVALID_PRIORITY_CODE = "invalid_priority_code"
    DUPLICATE_PRIORITY = "duplicate_priority"
    PRIORITY3_NOT_PERMITTED = "priority3_not_permitted"
    NIGHT_TYPES_COMBINED = "night_types_combined"
    INVALID_BATCH_SHIFT = "invalid_batch_shift"
    BATCH_PREFERENCE_CONFLICT = "batch_preference_conflict"


@dataclass
class ValidationError:
    """A single violated rule."""

    error_type: ValidationErrorType
    message: str
    staff_id: Optional[str] = None
    day: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.staff_id:
            parts.append(f"Staff {self.staff_id}:")
        parts.append(self.message)
        if self.day is not None:
            parts.append(f"({self.day.isoformat()})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Outcome of validating one wish set.

    ``accepted`` holds the wish set, unchanged, when no rule was violated.
    """

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    accepted: Optional[WishSet] = None

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False
        self.accepted = None

    @property
    def error_types(self) -> list[ValidationErrorType]:
        """Violated rule identifiers in evaluation order."""
        return [e.error_type for e in self.errors]

    def has(self, error_type: ValidationErrorType) -> bool:
        return error_type in self.error_types


class WishValidator:
    """Validates wish sets against a pre-schedule's quotas and preference rules.

    Example:
        >>> validator = WishValidator()
        >>> result = validator.validate(wish_set, request, WriterCapabilities(), today)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(
        self,
        catalog: Optional[ShiftCatalog] = None,
        calendar: Optional[HolidayCalendar] = None,
        priority_policy: Optional[PriorityPolicy] = None,
        night_policy: Optional[NightShiftPolicy] = None,
        code_policy: Optional[WishCodePolicy] = None,
    ):
        self.catalog = catalog or ShiftCatalog.default()
        self.calendar = calendar or HolidayCalendar()
        self.priority_policy = priority_policy or DefaultPriorityPolicy()
        self.night_policy = night_policy or DefaultNightShiftPolicy()
        self.code_policy = code_policy or DefaultWishCodePolicy()

    def validate(
        self,
        wish_set: WishSet,
        request: PreScheduleRequest,
        capabilities: WriterCapabilities,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Validate a candidate wish set.

        Args:
            wish_set: Wishes being submitted.
            request: The owning pre-schedule request.
            capabilities: Writer's capabilities (batch eligibility, override).
            today: Date of the submission; defaults to the current date.

        Returns:
            ValidationResult listing every violated rule.
        """
        result = ValidationResult(is_valid=True, accepted=wish_set)
        today = today or date.today()

        self._validate_lifecycle(wish_set, request, capabilities, today, result)
        self._validate_wish_codes(wish_set, request, capabilities, result)
        self._validate_quotas(wish_set, request, result)
        self._validate_preferences(wish_set, request, capabilities, result)

        if result.is_valid:
            logger.debug(
                "Accepted wishes of %s for %s/%04d-%02d",
                wish_set.staff_id, request.unit_id, request.year, request.month,
            )
        else:
            logger.warning(
                "Rejected wishes of %s for %s/%04d-%02d: %s",
                wish_set.staff_id, request.unit_id, request.year, request.month,
                ", ".join(t.value for t in result.error_types),
            )
        return result

    def _validate_lifecycle(
        self,
        wish_set: WishSet,
        request: PreScheduleRequest,
        capabilities: WriterCapabilities,
        today: date,
        result: ValidationResult,
    ) -> None:
        """Check the request status, editing window and participation."""
        denial = write_denial(request, capabilities, today)
        if denial is not None:
            error_type = (
                ValidationErrorType.REQUEST_LOCKED
                if isinstance(denial, RequestLocked)
                else ValidationErrorType.REQUEST_NOT_OPEN
            )
            result.add_error(
                ValidationError(
                    error_type=error_type,
                    message=str(denial),
                    staff_id=wish_set.staff_id,
                    details={"status": request.status.value},
                )
            )

        if not capabilities.admin_override and not request.is_participant(wish_set.staff_id):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NOT_A_PARTICIPANT,
                    message="Staff member is not a participant of this pre-schedule",
                    staff_id=wish_set.staff_id,
                )
            )

    def _validate_wish_codes(
        self,
        wish_set: WishSet,
        request: PreScheduleRequest,
        capabilities: WriterCapabilities,
        result: ValidationResult,
    ) -> None:
        """Check every wish date and code at the boundary."""
        staff_id = wish_set.staff_id

        if (wish_set.year, wish_set.month) != (request.year, request.month):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WRONG_MONTH,
                    message=(
                        f"Wish set targets {wish_set.year:04d}-{wish_set.month:02d} "
                        f"but request is {request.year:04d}-{request.month:02d}"
                    ),
                    staff_id=staff_id,
                )
            )

        for day, code in wish_set.sorted_wishes():
            if not request.contains(day):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DATE_OUTSIDE_MONTH,
                        message="Wish date is outside the target month",
                        staff_id=staff_id,
                        day=day,
                    )
                )

            if not self.code_policy.is_valid_wish(code, self.catalog):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_SHIFT_CODE,
                        message=f"Unknown shift code {code!r}",
                        staff_id=staff_id,
                        day=day,
                        details={"code": code},
                    )
                )
            elif self.code_policy.is_admin_only(code) and not capabilities.admin_override:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.MANAGER_CODE_RESTRICTED,
                        message=f"Only a scheduler may set {code!r}",
                        staff_id=staff_id,
                        day=day,
                        details={"code": code},
                    )
                )

    def _validate_quotas(
        self,
        wish_set: WishSet,
        request: PreScheduleRequest,
        result: ValidationResult,
    ) -> None:
        """Check the monthly and holiday off-day quotas."""
        # A manager-designated off is not the participant's own request
        rest_codes = {
            code for code in self.catalog.rest_codes
            if not self.code_policy.is_admin_only(code)
        }
        rest_days = [day for day, code in wish_set.wishes.items() if code in rest_codes]

        off_count = len(rest_days)
        if off_count > request.max_off_days:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.OFF_DAY_QUOTA_EXCEEDED,
                    message=(
                        f"{off_count} off days requested, "
                        f"monthly limit is {request.max_off_days}"
                    ),
                    staff_id=wish_set.staff_id,
                    details={"count": off_count, "limit": request.max_off_days},
                )
            )

        holiday_count = sum(1 for day in rest_days if self.calendar.is_holiday(day))
        if holiday_count > request.max_holiday:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.HOLIDAY_OFF_QUOTA_EXCEEDED,
                    message=(
                        f"{holiday_count} holiday off days requested, "
                        f"limit is {request.max_holiday}"
                    ),
                    staff_id=wish_set.staff_id,
                    details={"count": holiday_count, "limit": request.max_holiday},
                )
            )

    def _validate_preferences(
        self,
        wish_set: WishSet,
        request: PreScheduleRequest,
        capabilities: WriterCapabilities,
        result: ValidationResult,
    ) -> None:
        """Check priority order, diversity cap, night exclusivity and batch."""
        staff_id = wish_set.staff_id
        prefs = wish_set.preferences
        work_codes = set(self.catalog.work_codes)

        third_allowed = self.priority_policy.allows_third_priority(request)
        ranked = [prefs.priority1, prefs.priority2]
        if prefs.priority3:
            if third_allowed:
                ranked.append(prefs.priority3)
            else:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.PRIORITY3_NOT_PERMITTED,
                        message=(
                            "A third priority needs a three-type limit "
                            "or the voluntary three-type option"
                        ),
                        staff_id=staff_id,
                        details={"priority3": prefs.priority3},
                    )
                )
        selected = [code for code in ranked if code]

        for code in selected:
            if code not in work_codes:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_PRIORITY_CODE,
                        message=f"Priority {code!r} is not a worked shift",
                        staff_id=staff_id,
                        details={"code": code},
                    )
                )

        if len(selected) != len(set(selected)):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DUPLICATE_PRIORITY,
                    message="Priorities must name different shifts",
                    staff_id=staff_id,
                    details={"priorities": selected},
                )
            )

        night_a, night_b = self.night_policy.night_codes()
        if night_a in selected and night_b in selected:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.NIGHT_TYPES_COMBINED,
                    message=f"Priorities cannot include both {night_a} and {night_b}",
                    staff_id=staff_id,
                    details={"priorities": selected},
                )
            )

        batch = wish_set.batch_preference
        if not batch:
            return
        # Batch preferences of staff without the capability carry no weight
        if not capabilities.can_batch:
            logger.debug("Ignoring batch preference of ineligible %s", staff_id)
            return

        conflicting = self.night_policy.opposite(batch)
        if conflicting is None:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_BATCH_SHIFT,
                    message=f"Batch preference {batch!r} is not a night shift",
                    staff_id=staff_id,
                    details={"batch": batch},
                )
            )
        elif conflicting in selected:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.BATCH_PREFERENCE_CONFLICT,
                    message=(
                        f"Batching {batch} contradicts prioritizing {conflicting}"
                    ),
                    staff_id=staff_id,
                    details={"batch": batch, "conflicting": conflicting},
                )
            )


def validate_wish_set(
    wish_set: WishSet,
    request: PreScheduleRequest,
    capabilities: WriterCapabilities,
    today: Optional[date] = None,
    catalog: Optional[ShiftCatalog] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> ValidationResult:
    """Validate with default policies. See WishValidator.validate."""
    validator = WishValidator(catalog=catalog, calendar=calendar)
    return validator.validate(wish_set, request, capabilities, today)
