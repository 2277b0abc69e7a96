"""
workforce_report_engine.py — Composite workforce reports built on the core engines.

Covers:
  - Per-employee lost-hours summary (efficiency, recent shortfall, trend)
  - Department lost-hours analysis (summary, buckets, top issues,
    recommendations, daily trends)
  - Roster cost analysis: weekly cost per employee at the standard week,
    rolled up by position, department and agency
"""

from typing import Dict, Iterable, List, Optional
from datetime import date
import logging

from shiftguard import config
from shiftguard.models.labor_records import (
    DepartmentAnalysis,
    EmployeeLostHoursSummary,
    EmployeeRecord,
    EmployeeWeeklyCost,
    GroupCost,
    RosterCostAnalysis,
    ShiftRecord,
    TrendDirection,
)
from shiftguard.services.business_rules import BusinessRules
from shiftguard.services.labor_engine import compute_shift_costs, safe_float
from shiftguard.services.lost_hours_engine import aggregate_lost_hours, efficiency_pct, grouping_key
from shiftguard.services.recommendation_engine import generate_recommendations
from shiftguard.services.shift_validation import filter_by_timeframe
from shiftguard.services.trend_engine import analyze_trends, parse_iso_date
from shiftguard.services.perf_monitor import tracked

logger = logging.getLogger("shiftguard-workforce")


# ---------------------------------------------------------------------------
# 1. Employee lost-hours summary
# ---------------------------------------------------------------------------

def _chronological(shifts: List[ShiftRecord]) -> List[ShiftRecord]:
    """Oldest first; undated shifts go first, input order otherwise preserved."""
    def key(shift):
        day = parse_iso_date(shift.date)
        return (day is not None, day or date.min)
    return sorted(shifts, key=key)


def _regular_efficiency(costs, paid_hours: float) -> float:
    if not costs:
        return 0.0
    return efficiency_pct(sum(c.regular_hours for c in costs), len(costs) * paid_hours)


def summarize_employee(
    shifts: Iterable[ShiftRecord],
    rules: BusinessRules,
    employee_id: Optional[str] = None,
) -> EmployeeLostHoursSummary:
    """
    Summarise one employee's shifts.

    Actual hours are regular hours (capped at the paid hours per shift).
    ``recent_lost_hours`` covers the three most recent shifts. The trend
    compares the efficiency of the later half of the shifts with the earlier
    half: higher later efficiency is "improving". Shifts without a readable
    date count in the totals but are ordered before all dated shifts, so they
    are never treated as recent.
    """
    ordered = _chronological(list(shifts))
    if employee_id is None:
        employee_id = grouping_key(ordered[0].employee_id) if ordered else config.UNKNOWN_KEY
    if not ordered:
        return EmployeeLostHoursSummary(employee_id=employee_id)

    paid = rules.paid_hours_per_shift
    costs = compute_shift_costs(ordered, rules)
    lost = [max(0.0, paid - c.regular_hours) for c in costs]

    trend = TrendDirection.STABLE
    if len(costs) >= 2:
        half = len(costs) // 2
        earlier = _regular_efficiency(costs[:half], paid)
        later = _regular_efficiency(costs[half:], paid)
        if later > earlier:
            trend = TrendDirection.IMPROVING
        elif later < earlier:
            trend = TrendDirection.DECLINING

    return EmployeeLostHoursSummary(
        employee_id=employee_id,
        shifts_worked=len(costs),
        total_lost_hours=sum(lost),
        total_lost_cost=sum(h * c.hourly_rate for h, c in zip(lost, costs)),
        average_efficiency=_regular_efficiency(costs, paid),
        recent_lost_hours=sum(lost[-config.EMPLOYEE_RECENT_SHIFTS:]),
        trend=trend,
    )


def summarize_employees(
    shifts: Iterable[ShiftRecord], rules: BusinessRules
) -> Dict[str, EmployeeLostHoursSummary]:
    """Summaries keyed by employee id, in order of first appearance."""
    grouped: Dict[str, List[ShiftRecord]] = {}
    for shift in shifts:
        grouped.setdefault(grouping_key(shift.employee_id), []).append(shift)
    return {
        emp_id: summarize_employee(emp_shifts, rules, employee_id=emp_id)
        for emp_id, emp_shifts in grouped.items()
    }


# ---------------------------------------------------------------------------
# 2. Department analysis
# ---------------------------------------------------------------------------

def department_analysis(
    shifts: Iterable[ShiftRecord],
    rules: BusinessRules,
    department: Optional[str] = None,
    timeframe: Optional[str] = None,
    as_of: Optional[date] = None,
) -> DepartmentAnalysis:
    """
    Lost-hours analysis for one department (or all when ``department`` is None).

    ``timeframe`` ("7d", "30d", "90d") restricts the shifts to the window
    ending at ``as_of``; both must be given together.
    """
    selected = [
        s for s in shifts
        if department is None or grouping_key(s.department) == department
    ]
    if timeframe is not None:
        if as_of is None:
            raise ValueError("as_of is required when a timeframe is given")
        selected = filter_by_timeframe(selected, timeframe, as_of)

    report = aggregate_lost_hours(selected, rules)
    return DepartmentAnalysis(
        total_shifts=report.shift_count,
        total_lost_hours=report.total_lost_hours,
        total_lost_cost=report.total_lost_cost,
        average_efficiency=report.efficiency.overall_efficiency,
        departments=report.by_department,
        top_issues=report.entries[: config.DEPARTMENT_TOP_ISSUES],
        recommendations=generate_recommendations(report),
        trends=analyze_trends(selected, rules),
    )


# ---------------------------------------------------------------------------
# 3. Roster cost analysis
# ---------------------------------------------------------------------------

def _add_group(groups: Dict[str, List[float]], key: str, weekly_cost: float) -> None:
    totals = groups.setdefault(key, [0, 0.0])
    totals[0] += 1
    totals[1] += weekly_cost


@tracked("roster_cost")
def employee_cost_analysis(
    employees: Iterable[EmployeeRecord], rules: BusinessRules
) -> RosterCostAnalysis:
    """
    Weekly cost of a roster at ``rules.standard_hours_per_week``.

    Each employee costs standard hours × hourly rate per week. An empty roster
    yields zero totals and a zero average rate.
    """
    by_position: Dict[str, List[float]] = {}
    by_department: Dict[str, List[float]] = {}
    by_agency: Dict[str, List[float]] = {}
    rows: List[EmployeeWeeklyCost] = []
    total_rate = 0.0

    for emp in employees:
        rate = safe_float(emp.hourly_rate)
        weekly = rules.standard_hours_per_week * rate
        total_rate += rate

        position = grouping_key(emp.position)
        department = grouping_key(emp.department)
        agency = grouping_key(emp.agency)
        _add_group(by_position, position, weekly)
        _add_group(by_department, department, weekly)
        _add_group(by_agency, agency, weekly)

        rows.append(EmployeeWeeklyCost(
            employee_number=grouping_key(emp.employee_number),
            name=grouping_key(emp.name),
            position=position,
            department=department,
            agency=agency,
            hourly_rate=rate,
            weekly_cost=weekly,
        ))

    def freeze(groups):
        return {k: GroupCost(count=int(v[0]), total_cost=v[1]) for k, v in groups.items()}

    return RosterCostAnalysis(
        total_employees=len(rows),
        total_weekly_cost=sum(r.weekly_cost for r in rows),
        average_hourly_rate=total_rate / len(rows) if rows else 0.0,
        by_position=freeze(by_position),
        by_department=freeze(by_department),
        by_agency=freeze(by_agency),
        employees=rows,
    )
