"""
labor_engine.py — Shift Cost Calculator.

Covers:
  - Regular / overtime split against the paid-hours-per-shift threshold
  - Overtime premium (overtime_rate × hourly rate)
  - Night-shift allowance, stacked on top of regular/overtime pay
  - Permissive normalisation of missing or malformed numeric fields

Worked example (defaults: 7.5 paid hours, 1.5× overtime, 10 % night allowance):
    9.0 h night shift @ 40.00/h
      regular   = 7.5 h × 40.00          = 300.00
      overtime  = 1.5 h × 40.00 × 1.5    =  90.00
      allowance = 9.0 h × 40.00 × 0.10   =  36.00
      total                              = 426.00
"""

import logging
import math
from typing import Any

from shiftguard.models.labor_records import CostBreakdown, ShiftRecord
from shiftguard.services.business_rules import BusinessRules
from shiftguard.services.perf_monitor import timed

logger = logging.getLogger("shiftguard-labor")


def safe_float(value: Any) -> float:
    """
    Coerce a possibly-missing numeric field to a non-negative float.

    ``None``, empty strings, non-numeric text, NaN/inf and negative values all
    become 0.0; a malformed record is degraded, not rejected.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def compute_shift_cost(shift: ShiftRecord, rules: BusinessRules) -> CostBreakdown:
    """
    Decompose one shift into regular pay, overtime pay and night allowance.

    Hours up to ``rules.paid_hours_per_shift`` are regular; the excess is
    overtime paid at ``rules.overtime_rate``. A flagged night shift earns
    ``rules.night_shift_allowance_rate`` of pay on every hour worked, added to
    (not replacing) the regular/overtime pay.
    """
    hours = safe_float(shift.hours_worked)
    rate = safe_float(shift.hourly_rate)

    regular_hours = min(hours, rules.paid_hours_per_shift)
    overtime_hours = max(0.0, hours - rules.paid_hours_per_shift)
    night_hours = hours if shift.is_night_shift else 0.0

    regular_cost = regular_hours * rate
    overtime_cost = overtime_hours * rate * rules.overtime_rate
    night_allowance = night_hours * rate * rules.night_shift_allowance_rate
    total_cost = regular_cost + overtime_cost + night_allowance

    return CostBreakdown(
        employee_id=shift.employee_id,
        employee_name=shift.employee_name,
        department=shift.department,
        agency=shift.agency,
        cost_centre=shift.cost_centre,
        date=shift.date,
        hourly_rate=rate,
        hours_worked=hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        night_shift_hours=night_hours,
        regular_cost=regular_cost,
        overtime_cost=overtime_cost,
        night_allowance=night_allowance,
        total_cost=total_cost,
    )


@timed
def compute_shift_costs(shifts, rules: BusinessRules) -> list:
    """Cost every shift in ``shifts``, preserving input order."""
    breakdowns = [compute_shift_cost(shift, rules) for shift in shifts]
    logger.debug(f"Costed {len(breakdowns)} shifts")
    return breakdowns
