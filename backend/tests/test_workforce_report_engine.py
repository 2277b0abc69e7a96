"""
test_workforce_report_engine.py — Unit tests for the composite workforce reports.

Tests cover:
  - summarize_employee / summarize_employees: totals, recent shortfall, trend
  - department_analysis: department filter, timeframe window, bundled outputs
  - employee_cost_analysis: weekly cost at the standard week and rollups
"""

from datetime import date

import pytest

from shiftguard.models.labor_records import EmployeeRecord, Priority, TrendDirection
from shiftguard.services.business_rules import BusinessRules
from shiftguard.services.workforce_report_engine import (
    department_analysis,
    employee_cost_analysis,
    summarize_employee,
    summarize_employees,
)

TOL = 1e-6


# ===========================================================================
# Class 1: Employee summary
# ===========================================================================

class TestEmployeeSummary:

    def test_summary_for_declining_employee(self, mixed_shifts, rules):
        """
        E1: 6.0 h then 5.0 h @ 40 → lost 1.5 + 2.5 = 4.0 h, cost 160.
        Efficiency 11 / 15 = 73.33 %. Later half (66.7 %) < earlier half (80 %) → declining.
        """
        e1 = [s for s in mixed_shifts if s.employee_id == "E1"]
        summary = summarize_employee(e1, rules)
        assert summary.employee_id == "E1"
        assert summary.shifts_worked == 2
        assert abs(summary.total_lost_hours - 4.0) < TOL
        assert abs(summary.total_lost_cost - 160.0) < TOL
        assert abs(summary.average_efficiency - 11.0 / 15.0 * 100) < TOL
        assert abs(summary.recent_lost_hours - 4.0) < TOL
        assert summary.trend == TrendDirection.DECLINING

    def test_improving_trend_with_unsorted_input(self, make_shift, rules):
        """Chronologically 4.0, 5.0, 7.0, 7.5 h: the later half is better."""
        shifts = [
            make_shift(date="2026-03-04", hours_worked=7.0),
            make_shift(date="2026-03-01", hours_worked=4.0),
            make_shift(date="2026-03-05", hours_worked=7.5),
            make_shift(date="2026-03-02", hours_worked=5.0),
        ]
        summary = summarize_employee(shifts, rules)
        assert summary.trend == TrendDirection.IMPROVING

    def test_recent_lost_hours_covers_last_three_shifts(self, make_shift, rules):
        """Lost per shift chronologically 3.5, 2.5, 1.5, 0.5, 0 → last three = 2.0."""
        shifts = [
            make_shift(date=f"2026-03-0{d}", hours_worked=h)
            for d, h in ((1, 4.0), (2, 5.0), (3, 6.0), (4, 7.0), (5, 7.5))
        ]
        summary = summarize_employee(shifts, rules)
        assert abs(summary.recent_lost_hours - 2.0) < TOL
        assert abs(summary.total_lost_hours - 8.0) < TOL

    def test_undated_shifts_never_count_as_recent(self, make_shift, rules):
        """
        Three full dated shifts plus one undated 4.0 h shift (lost 3.5 h).
        The undated shift is ordered first: recent lost hours 0, total 3.5,
        earlier half (4 + 7.5) / 15 = 76.7 % < later half 100 % → improving.
        """
        shifts = [
            make_shift(date="2026-03-01"),
            make_shift(date="2026-03-02"),
            make_shift(date="2026-03-03"),
            make_shift(date="unknown", hours_worked=4.0),
        ]
        summary = summarize_employee(shifts, rules)
        assert summary.shifts_worked == 4
        assert summary.recent_lost_hours == 0.0
        assert abs(summary.total_lost_hours - 3.5) < TOL
        assert summary.trend == TrendDirection.IMPROVING

    def test_overtime_capped_in_efficiency(self, make_shift, rules):
        summary = summarize_employee([make_shift(hours_worked=12.0)], rules)
        assert abs(summary.average_efficiency - 100.0) < TOL
        assert summary.total_lost_hours == 0.0
        assert summary.trend == TrendDirection.STABLE

    def test_empty_shifts(self, rules):
        summary = summarize_employee([], rules, employee_id="E9")
        assert summary.employee_id == "E9"
        assert summary.shifts_worked == 0
        assert summary.total_lost_hours == 0.0

    def test_summaries_keyed_by_employee(self, mixed_shifts, rules):
        summaries = summarize_employees(mixed_shifts, rules)
        assert list(summaries) == ["E1", "E2", "E3", "E4", "E5"]
        assert summaries["E3"].shifts_worked == 2
        assert summaries["E3"].trend == TrendDirection.IMPROVING
        assert abs(summaries["E5"].total_lost_hours - 5.0) < TOL


# ===========================================================================
# Class 2: Department analysis
# ===========================================================================

class TestDepartmentAnalysis:

    def test_all_departments(self, mixed_shifts, rules):
        analysis = department_analysis(mixed_shifts, rules)
        assert analysis.total_shifts == 8
        assert abs(analysis.total_lost_hours - 13.0) < TOL
        assert abs(analysis.total_lost_cost - 455.0) < TOL
        assert set(analysis.departments) == {"Picking", "Inventory", "Ecom", "Beauty Picking"}
        assert len(analysis.top_issues) == 5
        assert len(analysis.trends) == 2
        assert analysis.recommendations[0].priority == Priority.HIGH

    def test_single_department(self, mixed_shifts, rules):
        """
        Picking: lost 1.5 + 2.5 + 0.5 = 4.5 h, cost 180, efficiency 25.5 / 30 = 85 %.
        Only Anele's 2.5 h shift triggers a (medium) review.
        """
        analysis = department_analysis(mixed_shifts, rules, department="Picking")
        assert analysis.total_shifts == 4
        assert abs(analysis.total_lost_hours - 4.5) < TOL
        assert abs(analysis.total_lost_cost - 180.0) < TOL
        assert abs(analysis.average_efficiency - 85.0) < TOL
        assert list(analysis.departments) == ["Picking"]
        assert [r.subject for r in analysis.recommendations] == ["Anele"]
        assert analysis.recommendations[0].priority == Priority.MEDIUM

    def test_top_issues_capped_at_ten(self, make_shift, rules):
        shifts = [make_shift(employee_id=f"E{i}", hours_worked=5.0) for i in range(12)]
        analysis = department_analysis(shifts, rules)
        assert len(analysis.top_issues) == 10

    def test_timeframe_window_is_inclusive(self, mixed_shifts, rules):
        analysis = department_analysis(
            mixed_shifts, rules, timeframe="7d", as_of=date(2026, 3, 2)
        )
        assert analysis.total_shifts == 4
        assert [p.date for p in analysis.trends] == ["2026-03-02"]

    def test_timeframe_excludes_older_shifts(self, make_shift, rules):
        shifts = [make_shift(date="2026-01-01"), make_shift(date="2026-03-01")]
        analysis = department_analysis(shifts, rules, timeframe="30d", as_of=date(2026, 3, 2))
        assert analysis.total_shifts == 1

    def test_timeframe_requires_as_of(self, mixed_shifts, rules):
        with pytest.raises(ValueError):
            department_analysis(mixed_shifts, rules, timeframe="7d")

    def test_unknown_department_is_empty(self, mixed_shifts, rules):
        analysis = department_analysis(mixed_shifts, rules, department="Canteen")
        assert analysis.total_shifts == 0
        assert analysis.departments == {}
        assert analysis.recommendations == []
        assert analysis.trends == []

    def test_serialises(self, mixed_shifts, rules):
        d = department_analysis(mixed_shifts, rules).to_dict()
        assert d["top_issues"][0]["status"] == "poor"
        assert d["trends"][1]["direction"] == "declining"


# ===========================================================================
# Class 3: Roster cost analysis
# ===========================================================================

def _employee(number, position, department, agency, rate):
    return EmployeeRecord(
        employee_number=number, name=f"Employee {number}", position=position,
        department=department, agency=agency, hourly_rate=rate,
    )


class TestRosterCost:

    def test_weekly_cost_and_rollups(self, rules):
        """45 h standard week: 40/h → 1800, 20/h → 900, 30/h → 1350. Total 4050, avg rate 30."""
        roster = [
            _employee("1", "Picker", "Picking", "Adcorp Blu", 40.0),
            _employee("2", "Packer", "Picking", "Workforce", 20.0),
            _employee("3", "Picker", "Ecom", "Adcorp Blu", 30.0),
        ]
        analysis = employee_cost_analysis(roster, rules)
        assert analysis.total_employees == 3
        assert abs(analysis.total_weekly_cost - 4050.0) < TOL
        assert abs(analysis.average_hourly_rate - 30.0) < TOL
        assert analysis.by_position["Picker"].count == 2
        assert abs(analysis.by_position["Picker"].total_cost - 3150.0) < TOL
        assert abs(analysis.by_department["Picking"].total_cost - 2700.0) < TOL
        assert analysis.by_agency["Workforce"].count == 1
        assert [e.weekly_cost for e in analysis.employees] == [1800.0, 900.0, 1350.0]

    def test_custom_standard_week(self):
        rules = BusinessRules(standard_hours_per_week=40.0)
        analysis = employee_cost_analysis([_employee("1", "Picker", "Picking", "X", 10.0)], rules)
        assert abs(analysis.total_weekly_cost - 400.0) < TOL

    def test_empty_roster(self, rules):
        analysis = employee_cost_analysis([], rules)
        assert analysis.total_employees == 0
        assert analysis.total_weekly_cost == 0.0
        assert analysis.average_hourly_rate == 0.0
