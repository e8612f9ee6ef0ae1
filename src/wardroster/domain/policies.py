"""Policy definitions for wish preference rules.

Policies hold the unit-level rules that are not stored on a single
pre-schedule request: which codes count as night shifts, whether a third
priority may be stated, and which special wish codes exist. They are kept
separate from the validator so each rule can be tested and swapped
independently.
"""

from abc import ABC, abstractmethod
from typing import Optional

from wardroster.domain.models import PreScheduleRequest, ShiftCatalog


class PriorityPolicy(ABC):
    """Abstract base class for shift-type priority rules."""

    @abstractmethod
    def allows_third_priority(self, request: PreScheduleRequest) -> bool:
        """Whether ``priority3`` may be stated for this request."""
        pass


class NightShiftPolicy(ABC):
    """Abstract base class for night-shift exclusivity rules."""

    @abstractmethod
    def night_codes(self) -> tuple[str, str]:
        """The two mutually exclusive night-shift codes."""
        pass

    @abstractmethod
    def opposite(self, code: str) -> Optional[str]:
        """The other night code, or None when ``code`` is not a night code."""
        pass


class WishCodePolicy(ABC):
    """Abstract base class for which codes a wish may hold."""

    @abstractmethod
    def is_valid_wish(self, code: str, catalog: ShiftCatalog) -> bool:
        pass

    @abstractmethod
    def is_admin_only(self, code: str) -> bool:
        pass


class DefaultPriorityPolicy(PriorityPolicy):
    """Third priority is allowed when the diversity limit is 3.

    With ``rule="either"`` (default) a voluntary three-type opt-in on the
    request also allows it. ``rule="limit_only"`` ignores the opt-in.
    """

    RULES = ("either", "limit_only")

    def __init__(self, rule: str = "either"):
        if rule not in self.RULES:
            raise ValueError(f"Unknown priority3 rule: {rule!r}")
        self.rule = rule

    def allows_third_priority(self, request: PreScheduleRequest) -> bool:
        if request.shift_types_limit == 3:
            return True
        return self.rule == "either" and request.allow_three_types_voluntary


class DefaultNightShiftPolicy(NightShiftPolicy):
    """Evening (E) and overnight (N) are the two night types."""

    def __init__(self, evening: str = "E", overnight: str = "N"):
        if evening == overnight:
            raise ValueError("Night codes must differ")
        self.evening = evening
        self.overnight = overnight

    def night_codes(self) -> tuple[str, str]:
        return (self.evening, self.overnight)

    def opposite(self, code: str) -> Optional[str]:
        if code == self.evening:
            return self.overnight
        if code == self.overnight:
            return self.evening
        return None


class DefaultWishCodePolicy(WishCodePolicy):
    """Catalog codes plus avoid-wishes and the manager-designated off.

    A wish may hold any catalog code, ``<avoid_prefix><code>`` for any
    worked code (e.g. ``NO_D``: "please not a day shift"), or the
    manager-designated off code, which only an administrative override
    may write.
    """

    def __init__(self, avoid_prefix: str = "NO_", manager_off_code: str = "M_OFF"):
        self.avoid_prefix = avoid_prefix
        self.manager_off_code = manager_off_code

    def avoided_code(self, code: str) -> Optional[str]:
        """Worked code behind an avoid-wish, or None."""
        if self.avoid_prefix and code.startswith(self.avoid_prefix):
            return code[len(self.avoid_prefix):]
        return None

    def is_valid_wish(self, code: str, catalog: ShiftCatalog) -> bool:
        if code in catalog or code == self.manager_off_code:
            return True
        avoided = self.avoided_code(code)
        return avoided is not None and avoided in catalog.work_codes

    def is_admin_only(self, code: str) -> bool:
        return code == self.manager_off_code
