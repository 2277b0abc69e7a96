"""
trend_engine.py — Day-over-day lost-hours trend analysis.

Shifts are costed, bucketed by calendar date and compared with the
chronologically previous date present in the input. Calendar days without
records are skipped, never synthesised as empty points.

Per-date actual hours are the *regular* (paid, non-overtime) hours of each
shift; a day's efficiency is capped at 100 %.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from shiftguard.models.labor_records import CostBreakdown, TrendDirection, TrendPoint
from shiftguard.services.business_rules import BusinessRules
from shiftguard.services.labor_engine import compute_shift_cost
from shiftguard.services.lost_hours_engine import ShiftLike, efficiency_pct, grouping_key
from shiftguard.services.perf_monitor import tracked

logger = logging.getLogger("shiftguard-trends")


def parse_iso_date(value) -> Optional[date]:
    """Return the calendar date of an ISO string / date, or None when it cannot be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def trend_direction(previous_lost_hours: Optional[float], current_lost_hours: float) -> TrendDirection:
    """Fewer lost hours than the previous date is an improvement."""
    if previous_lost_hours is None:
        return TrendDirection.STABLE
    if current_lost_hours < previous_lost_hours:
        return TrendDirection.IMPROVING
    if current_lost_hours > previous_lost_hours:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


class _DayTotals:
    __slots__ = ("lost_hours", "cost", "shifts", "employees", "departments", "scheduled", "actual")

    def __init__(self):
        self.lost_hours = 0.0
        self.cost = 0.0
        self.shifts = 0
        self.employees = set()
        self.departments = set()
        self.scheduled = 0.0
        self.actual = 0.0


@tracked("trends")
def analyze_trends(shifts: Iterable[ShiftLike], rules: BusinessRules) -> List[TrendPoint]:
    """
    Build one ``TrendPoint`` per date present in ``shifts``, ascending by date.

    Accepts ``ShiftRecord`` objects or precomputed ``CostBreakdown`` objects.
    The input need not be sorted. Records whose date cannot be read are left
    out of the series, since they cannot be placed relative to other days.
    """
    days: Dict[date, _DayTotals] = {}
    skipped = 0
    paid = rules.paid_hours_per_shift

    for shift in shifts:
        cost = shift if isinstance(shift, CostBreakdown) else compute_shift_cost(shift, rules)
        day = parse_iso_date(cost.date)
        if day is None:
            skipped += 1
            continue
        totals = days.get(day)
        if totals is None:
            totals = days[day] = _DayTotals()

        lost = max(0.0, paid - cost.regular_hours)
        totals.lost_hours += lost
        totals.cost += lost * cost.hourly_rate
        totals.shifts += 1
        totals.employees.add(grouping_key(cost.employee_id))
        totals.departments.add(grouping_key(cost.department))
        totals.scheduled += paid
        totals.actual += cost.regular_hours

    if skipped:
        logger.warning(f"Trend analysis skipped {skipped} shifts without a readable date")

    points: List[TrendPoint] = []
    previous: Optional[float] = None
    for day in sorted(days):
        totals = days[day]
        employees = len(totals.employees)
        points.append(TrendPoint(
            date=day.isoformat(),
            lost_hours=totals.lost_hours,
            cost=totals.cost,
            shifts=totals.shifts,
            employees=employees,
            departments=len(totals.departments),
            average_per_employee=totals.lost_hours / employees if employees else 0.0,
            efficiency=efficiency_pct(totals.actual, totals.scheduled),
            direction=trend_direction(previous, totals.lost_hours),
        ))
        previous = totals.lost_hours
    return points
