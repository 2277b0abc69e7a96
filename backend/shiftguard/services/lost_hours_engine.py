"""
lost_hours_engine.py — Lost-Hours Aggregator.

Covers:
  - Per-shift shortfall against the fixed paid-hours-per-shift baseline
  - Rollups by department, agency, cost centre and calendar date
  - Overall and per-department efficiency (all shifts, not only deficient ones)
  - Efficiency status classification
  - Threshold alerts for individual shifts

The aggregation is an explicit fold: shifts are added to a locally scoped
``LostHoursAccumulator`` which is finalised once into an immutable
``LostHoursReport``. Bucket totals are plain sums, so two accumulators built
over disjoint partitions can be merged; ``aggregate_lost_hours_partitioned``
uses this to fold partitions independently.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from shiftguard import config
from shiftguard.models.labor_records import (
    AggregateBucket,
    Alert,
    AlertSeverity,
    CostBreakdown,
    EfficiencyMetrics,
    EfficiencyStatus,
    LostHoursEntry,
    LostHoursReport,
    ShiftRecord,
)
from shiftguard.services.business_rules import BusinessRules
from shiftguard.services.labor_engine import compute_shift_cost
from shiftguard.services.perf_monitor import tracked

logger = logging.getLogger("shiftguard-lost-hours")

ShiftLike = Union[ShiftRecord, CostBreakdown]


def efficiency_status(efficiency: float) -> EfficiencyStatus:
    """Classify an efficiency percentage; the first threshold met wins, highest first."""
    for threshold, label in config.EFFICIENCY_STATUS_THRESHOLDS:
        if efficiency >= threshold:
            return EfficiencyStatus(label)
    return EfficiencyStatus(config.EFFICIENCY_STATUS_FLOOR)


def efficiency_pct(actual_hours: float, scheduled_hours: float) -> float:
    return actual_hours / scheduled_hours * 100 if scheduled_hours > 0 else 0.0


def grouping_key(value) -> str:
    """Normalise an identifying field; missing values group under "unknown"."""
    if value is None:
        return config.UNKNOWN_KEY
    text = str(value).strip()
    return text or config.UNKNOWN_KEY


class _BucketTotals:
    """Mutable running totals for one grouping key. Lives only inside an accumulator."""

    __slots__ = ("lost_hours", "lost_cost", "employees", "scheduled_hours", "actual_hours")

    def __init__(self):
        self.lost_hours = 0.0
        self.lost_cost = 0.0
        self.employees = 0
        self.scheduled_hours = 0.0
        self.actual_hours = 0.0

    def add_loss(self, lost_hours: float, lost_cost: float) -> None:
        self.lost_hours += lost_hours
        self.lost_cost += lost_cost
        self.employees += 1

    def add_attendance(self, scheduled_hours: float, actual_hours: float) -> None:
        self.scheduled_hours += scheduled_hours
        self.actual_hours += actual_hours

    def merged(self, other: "_BucketTotals") -> "_BucketTotals":
        out = _BucketTotals()
        out.lost_hours = self.lost_hours + other.lost_hours
        out.lost_cost = self.lost_cost + other.lost_cost
        out.employees = self.employees + other.employees
        out.scheduled_hours = self.scheduled_hours + other.scheduled_hours
        out.actual_hours = self.actual_hours + other.actual_hours
        return out

    def freeze(self, with_efficiency: bool = False) -> AggregateBucket:
        if not with_efficiency:
            return AggregateBucket(
                lost_hours=self.lost_hours,
                lost_cost=self.lost_cost,
                employees=self.employees,
            )
        return AggregateBucket(
            lost_hours=self.lost_hours,
            lost_cost=self.lost_cost,
            employees=self.employees,
            scheduled_hours=self.scheduled_hours,
            actual_hours=self.actual_hours,
            efficiency=efficiency_pct(self.actual_hours, self.scheduled_hours),
        )


def _merge_buckets(
    left: Dict[str, _BucketTotals], right: Dict[str, _BucketTotals]
) -> Dict[str, _BucketTotals]:
    merged: Dict[str, _BucketTotals] = {}
    for key in list(left) + [k for k in right if k not in left]:
        a, b = left.get(key), right.get(key)
        if a is not None and b is not None:
            merged[key] = a.merged(b)
        else:
            merged[key] = (a or b).merged(_BucketTotals())
    return merged


class LostHoursAccumulator:
    """
    Fold state for one lost-hours report.

    ``add`` consumes one shift; ``merge`` combines two accumulators built with
    the same rule set (left operand's keys and entries first); ``finalize``
    produces the immutable report. Finalising does not consume the
    accumulator, so finalising twice yields equal reports.
    """

    def __init__(self, rules: BusinessRules):
        self.rules = rules
        self.shift_count = 0
        self.total_scheduled = 0.0
        self.total_actual = 0.0
        self.by_department: Dict[str, _BucketTotals] = {}
        self.by_agency: Dict[str, _BucketTotals] = {}
        self.by_cost_centre: Dict[str, _BucketTotals] = {}
        self.by_date: Dict[str, _BucketTotals] = {}
        self.entries: List[LostHoursEntry] = []
        self.alerts: List[Alert] = []

    @staticmethod
    def _bucket(buckets: Dict[str, _BucketTotals], key: str) -> _BucketTotals:
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _BucketTotals()
        return bucket

    def add(self, shift: ShiftLike) -> None:
        cost = shift if isinstance(shift, CostBreakdown) else compute_shift_cost(shift, self.rules)

        scheduled = self.rules.paid_hours_per_shift
        actual = cost.hours_worked
        lost_hours = max(0.0, scheduled - actual)

        department = grouping_key(cost.department)
        agency = grouping_key(cost.agency)
        cost_centre = grouping_key(cost.cost_centre)
        date_key = grouping_key(cost.date)

        self.shift_count += 1
        self.total_scheduled += scheduled
        self.total_actual += actual
        dept_bucket = self._bucket(self.by_department, department)
        dept_bucket.add_attendance(scheduled, actual)

        if lost_hours <= 0:
            return

        lost_cost = lost_hours * cost.hourly_rate
        dept_bucket.add_loss(lost_hours, lost_cost)
        self._bucket(self.by_agency, agency).add_loss(lost_hours, lost_cost)
        self._bucket(self.by_cost_centre, cost_centre).add_loss(lost_hours, lost_cost)
        self._bucket(self.by_date, date_key).add_loss(lost_hours, lost_cost)

        efficiency = efficiency_pct(actual, scheduled)
        employee_name = grouping_key(cost.employee_name)
        self.entries.append(LostHoursEntry(
            employee_id=grouping_key(cost.employee_id),
            employee_name=employee_name,
            employee_number=getattr(shift, "employee_number", None),
            department=department,
            agency=agency,
            cost_centre=cost_centre,
            date=date_key,
            hourly_rate=cost.hourly_rate,
            scheduled_hours=scheduled,
            actual_hours=actual,
            lost_hours=lost_hours,
            lost_cost=lost_cost,
            efficiency=efficiency,
            status=efficiency_status(efficiency),
        ))

        if lost_hours > config.ALERT_LOST_HOURS_THRESHOLD:
            severity = (
                AlertSeverity.HIGH
                if lost_hours > config.ALERT_HIGH_SEVERITY_THRESHOLD
                else AlertSeverity.MEDIUM
            )
            self.alerts.append(Alert(
                employee=employee_name,
                department=department,
                lost_hours=lost_hours,
                cost=lost_cost,
                date=date_key,
                severity=severity,
            ))

    def add_all(self, shifts: Iterable[ShiftLike]) -> "LostHoursAccumulator":
        for shift in shifts:
            self.add(shift)
        return self

    def merge(self, other: "LostHoursAccumulator") -> "LostHoursAccumulator":
        if other.rules != self.rules:
            raise ValueError("Cannot merge lost-hours accumulators built with different rule sets")
        out = LostHoursAccumulator(self.rules)
        out.shift_count = self.shift_count + other.shift_count
        out.total_scheduled = self.total_scheduled + other.total_scheduled
        out.total_actual = self.total_actual + other.total_actual
        out.by_department = _merge_buckets(self.by_department, other.by_department)
        out.by_agency = _merge_buckets(self.by_agency, other.by_agency)
        out.by_cost_centre = _merge_buckets(self.by_cost_centre, other.by_cost_centre)
        out.by_date = _merge_buckets(self.by_date, other.by_date)
        out.entries = self.entries + other.entries
        out.alerts = self.alerts + other.alerts
        return out

    def finalize(self) -> LostHoursReport:
        by_department = {
            dept: totals.freeze(with_efficiency=True)
            for dept, totals in self.by_department.items()
        }
        # Stable: equal lost hours keep their input order
        entries = sorted(self.entries, key=lambda e: -e.lost_hours)

        return LostHoursReport(
            total_lost_hours=sum(e.lost_hours for e in self.entries),
            total_lost_cost=sum(e.lost_cost for e in self.entries),
            shift_count=self.shift_count,
            by_department=by_department,
            by_agency={k: v.freeze() for k, v in self.by_agency.items()},
            by_cost_centre={k: v.freeze() for k, v in self.by_cost_centre.items()},
            daily_breakdown={k: v.freeze() for k, v in self.by_date.items()},
            entries=entries,
            alerts=list(self.alerts),
            efficiency=EfficiencyMetrics(
                overall_efficiency=efficiency_pct(self.total_actual, self.total_scheduled),
                total_scheduled_hours=self.total_scheduled,
                total_actual_hours=self.total_actual,
                department_efficiency={
                    dept: bucket.efficiency for dept, bucket in by_department.items()
                },
            ),
        )


@tracked("lost_hours")
def aggregate_lost_hours(
    shifts: Iterable[ShiftLike], rules: BusinessRules
) -> LostHoursReport:
    """
    Build the lost-hours report for a period.

    Accepts ``ShiftRecord`` objects or precomputed ``CostBreakdown`` objects
    (which must share ``rules.paid_hours_per_shift`` as their baseline).
    An empty collection yields a zero-valued report.
    """
    report = LostHoursAccumulator(rules).add_all(shifts).finalize()
    logger.info(
        f"Lost-hours report: {report.shift_count} shifts, "
        f"{len(report.entries)} with shortfall, {len(report.alerts)} alerts"
    )
    return report


def aggregate_lost_hours_partitioned(
    partitions: Iterable[Iterable[ShiftLike]],
    rules: BusinessRules,
    executor: Optional[object] = None,
) -> LostHoursReport:
    """
    Fold each partition into its own accumulator, then merge in partition order.

    ``executor`` may be any ``concurrent.futures.Executor``; partitions are
    then folded concurrently. The result equals ``aggregate_lost_hours`` over
    the concatenated partitions, up to floating-point summation order.
    """
    def fold(partition) -> LostHoursAccumulator:
        return LostHoursAccumulator(rules).add_all(partition)

    partitions = [list(p) for p in partitions]
    if executor is not None:
        partials = list(executor.map(fold, partitions))
    else:
        partials = [fold(p) for p in partitions]

    merged = LostHoursAccumulator(rules)
    for partial in partials:
        merged = merged.merge(partial)
    logger.debug(f"Merged {len(partials)} lost-hours partitions")
    return merged.finalize()
