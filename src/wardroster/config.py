"""Unit-level engine configuration.

Settings that outlive a single pre-schedule request: the shift catalog,
which codes are night shifts, the holiday list and a few rule knobs.
"""

import json
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Optional

from wardroster.domain.calendar import HolidayCalendar, HolidayEntry
from wardroster.domain.models import DEFAULT_SHIFTS, ShiftCatalog, ShiftDefinition
from wardroster.domain.policies import (
    DefaultNightShiftPolicy,
    DefaultPriorityPolicy,
    DefaultWishCodePolicy,
)
from wardroster.errors import ConfigError
from wardroster.validation.validator import WishValidator

PRIORITY3_RULES = ("either", "limit_only")


@dataclass
class EngineConfig:
    """Configuration shared by every pre-schedule of a unit.

    Attributes:
        shift_catalog: Shift definitions of the unit.
        night_codes: The two mutually exclusive night-shift codes.
        manager_off_code: Rest wish only a scheduler may set.
        avoid_prefix: Prefix of "please not this shift" wishes.
        holidays: Unit holiday list.
        holiday_country: ISO country code for national public holidays.
        carry_over_days: Prior-month days used to seed consecutive runs.
        priority3_rule: "either" (limit of 3 or voluntary opt-in) or
            "limit_only" (limit of 3 only).
    """

    shift_catalog: list[ShiftDefinition] = field(default_factory=lambda: list(DEFAULT_SHIFTS))
    night_codes: tuple[str, str] = ("E", "N")
    manager_off_code: str = "M_OFF"
    avoid_prefix: str = "NO_"
    holidays: list[HolidayEntry] = field(default_factory=list)
    holiday_country: Optional[str] = None
    carry_over_days: int = 6
    priority3_rule: str = "either"

    def __post_init__(self) -> None:
        if len(self.night_codes) != 2 or self.night_codes[0] == self.night_codes[1]:
            raise ConfigError(f"night_codes must be two distinct codes, got {self.night_codes}")
        if self.priority3_rule not in PRIORITY3_RULES:
            raise ConfigError(
                f"priority3_rule must be one of {PRIORITY3_RULES}, got {self.priority3_rule!r}"
            )
        if self.carry_over_days < 0:
            raise ConfigError("carry_over_days must be >= 0")

        catalog = self.catalog()
        for code in self.night_codes:
            if code not in catalog or catalog.is_rest(code):
                raise ConfigError(f"Night code {code!r} is not a worked shift of the catalog")
        manager = catalog.get(self.manager_off_code)
        if not manager.is_rest_code or self.manager_off_code == catalog.rest_code:
            raise ConfigError(
                f"manager_off_code {self.manager_off_code!r} must be a rest code "
                f"other than {catalog.rest_code!r}"
            )

    def catalog(self) -> ShiftCatalog:
        """Configured catalog; the manager-designated off is added as a rest code if absent."""
        definitions = list(self.shift_catalog)
        if all(d.code != self.manager_off_code for d in definitions):
            definitions.append(
                ShiftDefinition(self.manager_off_code, "Manager-designated off",
                                is_rest_code=True, counts_toward_stats=False,
                                sort_order=max((d.sort_order for d in definitions), default=0) + 1)
            )
        try:
            return ShiftCatalog(definitions)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def calendar(self) -> HolidayCalendar:
        return HolidayCalendar(self.holidays, country=self.holiday_country)

    def validator(self, calendar: Optional[HolidayCalendar] = None) -> WishValidator:
        """Build a WishValidator wired with this configuration's policies."""
        return WishValidator(
            catalog=self.catalog(),
            calendar=calendar or self.calendar(),
            priority_policy=DefaultPriorityPolicy(self.priority3_rule),
            night_policy=DefaultNightShiftPolicy(*self.night_codes),
            code_policy=DefaultWishCodePolicy(
                avoid_prefix=self.avoid_prefix,
                manager_off_code=self.manager_off_code,
            ),
        )

    def to_dict(self) -> dict:
        return {
            "shift_catalog": [d.to_dict() for d in self.shift_catalog],
            "night_codes": list(self.night_codes),
            "manager_off_code": self.manager_off_code,
            "avoid_prefix": self.avoid_prefix,
            "holidays": [h.to_dict() for h in self.holidays],
            "holiday_country": self.holiday_country,
            "carry_over_days": self.carry_over_days,
            "priority3_rule": self.priority3_rule,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Build a config from a dict; unknown keys are ignored."""
        valid = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid}

        try:
            if "shift_catalog" in filtered:
                filtered["shift_catalog"] = [
                    ShiftDefinition.from_dict(d) for d in filtered["shift_catalog"]
                ]
            if "night_codes" in filtered:
                filtered["night_codes"] = tuple(filtered["night_codes"])
            if "holidays" in filtered:
                filtered["holidays"] = [HolidayEntry.from_dict(h) for h in filtered["holidays"]]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Malformed configuration: {e}") from e

        return cls(**filtered)

    @classmethod
    def from_json(cls, path: str) -> "EngineConfig":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"{path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object")
        return cls.from_dict(data)


def parse_date(value: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date, raising ConfigError on bad input."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid date {value!r}") from e
