"""
business_rules.py — Business Rule Set for shift costing and lost-hours analytics.

The rule set is an immutable value passed explicitly into every engine entry
point. Several rule sets (per contract, per site) can be evaluated side by
side without interfering with each other.

Defaults match the warehouse operation's standard contract:
  - 7.5 paid hours per shift (overtime threshold, lost-hours baseline)
  - overtime paid at 1.5 × hourly rate
  - night-shift allowance of 10 % of pay, on top of regular/overtime pay
  - 45-hour standard week (roster cost projections only)
"""
from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from shiftguard.models.labor_records import CostCentre

logger = logging.getLogger("shiftguard-rules")


DEFAULT_PAID_HOURS_PER_SHIFT: float = 7.5
DEFAULT_OVERTIME_RATE: float = 1.5
DEFAULT_NIGHT_SHIFT_ALLOWANCE_RATE: float = 0.10
DEFAULT_STANDARD_HOURS_PER_WEEK: float = 45.0
DEFAULT_DAY_SHIFT_HOURS: float = 8.5        # rostered day shift incl. breaks
DEFAULT_NIGHT_SHIFT_HOURS: float = 8.0      # rostered night shift incl. breaks

# Accepted aliases for override keys (camelCase API payloads, legacy names)
_KEY_ALIASES: Dict[str, str] = {
    "paidHoursPerShift": "paid_hours_per_shift",
    "PAID_HOURS_PER_SHIFT": "paid_hours_per_shift",
    "overtimeRate": "overtime_rate",
    "OVERTIME_RATE": "overtime_rate",
    "nightShiftAllowanceRate": "night_shift_allowance_rate",
    "nightAllowanceRate": "night_shift_allowance_rate",
    "NIGHTSHIFT_ALLOWANCE_RATE": "night_shift_allowance_rate",
    "standardHoursPerWeek": "standard_hours_per_week",
    "STANDARD_HOURS_PER_WEEK": "standard_hours_per_week",
    "dayShiftHours": "day_shift_hours",
    "DAY_SHIFT_HOURS": "day_shift_hours",
    "nightShiftHours": "night_shift_hours",
    "NIGHT_SHIFT_HOURS": "night_shift_hours",
}

_ENV_VARS: Dict[str, str] = {
    "paid_hours_per_shift": "SHIFTGUARD_PAID_HOURS_PER_SHIFT",
    "overtime_rate": "SHIFTGUARD_OVERTIME_RATE",
    "night_shift_allowance_rate": "SHIFTGUARD_NIGHT_ALLOWANCE_RATE",
    "standard_hours_per_week": "SHIFTGUARD_STANDARD_HOURS_PER_WEEK",
}


class InvalidRuleSetError(ValueError):
    """Raised when a rule set is built from negative or non-numeric values."""


@dataclass(frozen=True)
class BusinessRules:
    paid_hours_per_shift: float = DEFAULT_PAID_HOURS_PER_SHIFT
    overtime_rate: float = DEFAULT_OVERTIME_RATE
    night_shift_allowance_rate: float = DEFAULT_NIGHT_SHIFT_ALLOWANCE_RATE
    standard_hours_per_week: float = DEFAULT_STANDARD_HOURS_PER_WEEK
    day_shift_hours: float = DEFAULT_DAY_SHIFT_HOURS
    night_shift_hours: float = DEFAULT_NIGHT_SHIFT_HOURS

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidRuleSetError(f"{name} must be numeric; received {value!r}")
            if not math.isfinite(value):
                raise InvalidRuleSetError(f"{name} must be finite; received {value}")
            if value < 0:
                raise InvalidRuleSetError(f"{name} must be non-negative; received {value}")
            object.__setattr__(self, name, float(value))

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "BusinessRules":
        """
        Return a copy with the given options replaced.

        Keys may be snake_case field names, the camelCase names used by API
        payloads, or the upper-case names of the legacy constant table.
        Unrecognised keys are ignored with a warning; ``None`` values are skipped.
        """
        if not overrides:
            return self
        changes: Dict[str, float] = {}
        for key, value in overrides.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in self.__dataclass_fields__:
                logger.warning(f"Ignoring unknown business rule option: {key}")
                continue
            if value is None:
                continue
            try:
                changes[name] = float(value)
            except (TypeError, ValueError):
                raise InvalidRuleSetError(f"{key} must be numeric; received {value!r}")
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BusinessRules":
        """Build a rule set from SHIFTGUARD_* environment variables over the defaults."""
        env = os.environ if environ is None else environ
        overrides = {
            name: env[var]
            for name, var in _ENV_VARS.items()
            if env.get(var) not in (None, "")
        }
        if overrides:
            logger.info(f"Business rules loaded from environment: {sorted(overrides)}")
        return cls().with_overrides(overrides)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Cost-centre reference data
# ---------------------------------------------------------------------------
# Injected into calls that need grouping context; this tuple is only the
# default value of those parameters.

DEFAULT_COST_CENTRES: tuple = (
    CostCentre(
        id="3040034",
        name="General Operations",
        departments=("Inbound", "Inventory", "Picking", "Despatch"),
    ),
    CostCentre(
        id="3040038",
        name="Beauty",
        departments=("Beauty Inbound", "Beauty Inventory", "Beauty Picking", "Beauty Despatch"),
    ),
    CostCentre(
        id="3040040",
        name="Ecom/Bash",
        departments=("Ecom", "Bash"),
    ),
)


def cost_centre_for_department(
    department: str, cost_centres=DEFAULT_COST_CENTRES
) -> Optional[str]:
    """Return the id of the cost centre that owns ``department``, if any."""
    for centre in cost_centres:
        if department in centre.departments:
            return centre.id
    return None
