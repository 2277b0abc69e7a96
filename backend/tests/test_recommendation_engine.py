"""
test_recommendation_engine.py — Unit tests for the Recommendation Engine.

Reports are built directly from record types so each rule can be exercised
in isolation, plus one end-to-end check over the shared ``mixed_shifts``.

Rules under test (defaults):
  department  efficiency < 85 → recommend; < 80 → high, else medium
  individual  top 5 entries with lost > 2 → recommend; > 3 → high
  agency      lost hours / entries > 1.5 → recommend; > 2.0 → high
"""

import pytest

from shiftguard.models.labor_records import (
    AggregateBucket,
    EfficiencyStatus,
    LostHoursEntry,
    LostHoursReport,
    Priority,
    Recommendation,
    RecommendationCategory,
)
from shiftguard.services.lost_hours_engine import aggregate_lost_hours
from shiftguard.services.recommendation_engine import generate_recommendations, sort_by_priority

TOL = 1e-6


def _dept(scheduled, actual, lost_hours=0.0, lost_cost=0.0, employees=0):
    return AggregateBucket(
        lost_hours=lost_hours,
        lost_cost=lost_cost,
        employees=employees,
        scheduled_hours=scheduled,
        actual_hours=actual,
        efficiency=actual / scheduled * 100 if scheduled else 0.0,
    )


def _entry(employee_id, lost_hours, rate=10.0, department="Picking"):
    actual = 7.5 - lost_hours
    return LostHoursEntry(
        employee_id=employee_id,
        employee_name=f"Name {employee_id}",
        employee_number=None,
        department=department,
        agency="Adcorp Blu",
        cost_centre="3040034",
        date="2026-03-02",
        hourly_rate=rate,
        scheduled_hours=7.5,
        actual_hours=actual,
        lost_hours=lost_hours,
        lost_cost=lost_hours * rate,
        efficiency=actual / 7.5 * 100,
        status=EfficiencyStatus.POOR,
    )


def _of(recs, category):
    return [r for r in recs if r.category == category]


# ===========================================================================
# Class 1: Department efficiency rule
# ===========================================================================

class TestDepartmentRule:

    def test_eighty_percent_is_medium(self):
        """
        75 scheduled, 60 actual → 80 %: below 85 so recommended, not below 80
        so medium. Lost cost 500 → potential savings 500 × 4 = 2000.
        """
        report = LostHoursReport(by_department={
            "Inventory": _dept(75.0, 60.0, lost_hours=15.0, lost_cost=500.0, employees=4),
        })
        (rec,) = generate_recommendations(report)
        assert rec.category == RecommendationCategory.DEPARTMENT_EFFICIENCY
        assert rec.subject == "Inventory"
        assert rec.priority == Priority.MEDIUM
        assert rec.metrics["current_efficiency"] == 80
        assert rec.metrics["target_efficiency"] == 90.0
        assert abs(rec.metrics["potential_savings"] - 2000.0) < TOL

    def test_below_eighty_is_high(self):
        report = LostHoursReport(by_department={"Inventory": _dept(100.0, 79.0)})
        (rec,) = generate_recommendations(report)
        assert rec.priority == Priority.HIGH

    def test_at_or_above_trigger_not_recommended(self):
        report = LostHoursReport(by_department={
            "Picking": _dept(100.0, 85.0),
            "Ecom": _dept(7.5, 9.0),
        })
        assert generate_recommendations(report) == []

    def test_department_without_scheduled_hours_skipped(self):
        report = LostHoursReport(by_department={"Ghost": _dept(0.0, 0.0)})
        assert generate_recommendations(report) == []

    def test_efficiency_rounded_in_metrics(self):
        report = LostHoursReport(by_department={"Inventory": _dept(15.0, 11.5)})
        (rec,) = generate_recommendations(report)
        assert rec.metrics["current_efficiency"] == 77


# ===========================================================================
# Class 2: Individual performance rule
# ===========================================================================

class TestIndividualRule:

    def test_threshold_and_priority(self):
        """2.0 h is not above the trigger; 2.5 h is medium; 3.5 h is high."""
        report = LostHoursReport(entries=[_entry("A", 3.5), _entry("B", 2.5), _entry("C", 2.0)])
        recs = _of(generate_recommendations(report), RecommendationCategory.INDIVIDUAL_PERFORMANCE)
        assert [(r.metrics["employee_id"], r.priority) for r in recs] == [
            ("A", Priority.HIGH),
            ("B", Priority.MEDIUM),
        ]

    def test_only_top_five_entries_considered(self):
        """Seven qualifying entries: only the first five are reviewed."""
        entries = [_entry(f"E{i}", 4.0) for i in range(7)]
        recs = generate_recommendations(LostHoursReport(entries=entries))
        assert [r.metrics["employee_id"] for r in recs] == ["E0", "E1", "E2", "E3", "E4"]

    def test_metrics(self):
        recs = generate_recommendations(LostHoursReport(entries=[_entry("A", 4.0, rate=50.0)]))
        metrics = recs[0].metrics
        assert metrics["department"] == "Picking"
        assert metrics["date"] == "2026-03-02"
        assert abs(metrics["lost_hours"] - 4.0) < TOL
        assert abs(metrics["cost"] - 200.0) < TOL
        assert recs[0].subject == "Name A"


# ===========================================================================
# Class 3: Agency rule
# ===========================================================================

class TestAgencyRule:

    @pytest.mark.parametrize("lost,count,expected", [
        (3.0, 2, None),             # avg 1.5, not above trigger
        (3.2, 2, Priority.MEDIUM),  # avg 1.6
        (4.0, 2, Priority.MEDIUM),  # avg 2.0, not above high threshold
        (4.2, 2, Priority.HIGH),    # avg 2.1
    ])
    def test_average_thresholds(self, lost, count, expected):
        report = LostHoursReport(by_agency={
            "Workforce": AggregateBucket(lost_hours=lost, lost_cost=lost * 10, employees=count),
        })
        recs = generate_recommendations(report)
        if expected is None:
            assert recs == []
        else:
            assert len(recs) == 1
            assert recs[0].priority == expected

    def test_metrics(self):
        """9.5 h over 4 entries → average 2.375, reported as 2.4."""
        report = LostHoursReport(by_agency={
            "Adcorp Blu": AggregateBucket(lost_hours=9.5, lost_cost=280.0, employees=4),
        })
        (rec,) = generate_recommendations(report)
        assert rec.metrics["average_lost_hours"] == 2.4
        assert rec.metrics["employees"] == 4
        assert abs(rec.metrics["total_cost"] - 280.0) < TOL

    def test_agency_without_entries_skipped(self):
        report = LostHoursReport(by_agency={"Empty": AggregateBucket()})
        assert generate_recommendations(report) == []


# ===========================================================================
# Class 4: Ordering
# ===========================================================================

class TestOrdering:

    def test_mixed_report_order(self, mixed_shifts, rules):
        """
        Before sorting: Inventory(H), Beauty Picking(H), Eli(H), Caro(H),
        Anele(M), Adcorp Blu(H), Workforce(H). Stable sort moves Anele last.
        """
        recs = generate_recommendations(aggregate_lost_hours(mixed_shifts, rules))
        assert [r.subject for r in recs] == [
            "Inventory", "Beauty Picking", "Eli", "Caro", "Adcorp Blu", "Workforce", "Anele",
        ]
        assert [r.priority for r in recs] == [Priority.HIGH] * 6 + [Priority.MEDIUM]

    def test_priorities_non_increasing(self, mixed_shifts, rules):
        recs = generate_recommendations(aggregate_lost_hours(mixed_shifts, rules))
        values = [int(r.priority) for r in recs]
        assert values == sorted(values, reverse=True)

    def test_sort_by_priority_is_stable_and_handles_low(self):
        def rec(subject, priority):
            return Recommendation(
                category=RecommendationCategory.AGENCY_PERFORMANCE,
                subject=subject, action="", priority=priority,
            )
        recs = [rec("l1", Priority.LOW), rec("m1", Priority.MEDIUM), rec("h1", Priority.HIGH),
                rec("l2", Priority.LOW), rec("h2", Priority.HIGH), rec("m2", Priority.MEDIUM)]
        assert [r.subject for r in sort_by_priority(recs)] == ["h1", "h2", "m1", "m2", "l1", "l2"]

    def test_empty_report(self):
        assert generate_recommendations(LostHoursReport()) == []

    def test_priority_serialises_as_label(self):
        recs = generate_recommendations(LostHoursReport(entries=[_entry("A", 4.0)]))
        d = recs[0].to_dict()
        assert d["priority"] == "high"
        assert d["category"] == "individual_performance"
