"""Recommendation engine — turns a lost-hours report into a prioritised action list."""
import logging
from typing import List

from shiftguard import config
from shiftguard.models.labor_records import (
    LostHoursReport,
    Priority,
    Recommendation,
    RecommendationCategory,
)

logger = logging.getLogger("shiftguard-recommendations")


def _department_recommendations(report: LostHoursReport) -> List[Recommendation]:
    recs = []
    for dept, bucket in report.by_department.items():
        # No attendance recorded for the department: nothing to judge
        if not bucket.scheduled_hours:
            continue
        efficiency = bucket.efficiency or 0.0
        if efficiency >= config.DEPARTMENT_EFFICIENCY_TRIGGER:
            continue
        recs.append(Recommendation(
            category=RecommendationCategory.DEPARTMENT_EFFICIENCY,
            subject=dept,
            action=f"Implement efficiency improvements in {dept}",
            priority=(
                Priority.HIGH
                if efficiency < config.DEPARTMENT_EFFICIENCY_HIGH_PRIORITY
                else Priority.MEDIUM
            ),
            metrics={
                "department": dept,
                "current_efficiency": round(efficiency),
                "target_efficiency": config.DEPARTMENT_TARGET_EFFICIENCY,
                "lost_hours": bucket.lost_hours,
                "lost_cost": bucket.lost_cost,
                "potential_savings": bucket.lost_cost * config.WEEKS_PER_MONTH_APPROXIMATION,
            },
        ))
    return recs


def _individual_recommendations(report: LostHoursReport) -> List[Recommendation]:
    recs = []
    # entries are already sorted by descending lost hours
    for entry in report.entries[: config.INDIVIDUAL_REVIEW_CANDIDATES]:
        if entry.lost_hours <= config.INDIVIDUAL_LOST_HOURS_TRIGGER:
            continue
        recs.append(Recommendation(
            category=RecommendationCategory.INDIVIDUAL_PERFORMANCE,
            subject=entry.employee_name,
            action=f"Schedule performance review with {entry.employee_name}",
            priority=(
                Priority.HIGH
                if entry.lost_hours > config.INDIVIDUAL_LOST_HOURS_HIGH_PRIORITY
                else Priority.MEDIUM
            ),
            metrics={
                "employee_id": entry.employee_id,
                "department": entry.department,
                "date": entry.date,
                "lost_hours": entry.lost_hours,
                "cost": entry.lost_cost,
            },
        ))
    return recs


def _agency_recommendations(report: LostHoursReport) -> List[Recommendation]:
    recs = []
    for agency, bucket in report.by_agency.items():
        if bucket.employees <= 0:
            continue
        avg_lost = bucket.lost_hours / bucket.employees
        if avg_lost <= config.AGENCY_AVG_LOST_HOURS_TRIGGER:
            continue
        recs.append(Recommendation(
            category=RecommendationCategory.AGENCY_PERFORMANCE,
            subject=agency,
            action=f"Review contract and performance with {agency}",
            priority=(
                Priority.HIGH
                if avg_lost > config.AGENCY_AVG_LOST_HOURS_HIGH_PRIORITY
                else Priority.MEDIUM
            ),
            metrics={
                "agency": agency,
                "average_lost_hours": round(avg_lost, 1),
                "lost_hours": bucket.lost_hours,
                "total_cost": bucket.lost_cost,
                "employees": bucket.employees,
            },
        ))
    return recs


def sort_by_priority(recommendations: List[Recommendation]) -> List[Recommendation]:
    """High before medium before low; equal priorities keep their order."""
    return sorted(recommendations, key=lambda r: -int(r.priority))


def generate_recommendations(report: LostHoursReport) -> List[Recommendation]:
    """
    Evaluate every rule against ``report`` and return all applicable
    recommendations, department rules first, then individuals, then agencies,
    stably sorted by priority.
    """
    recs = []
    recs.extend(_department_recommendations(report))
    recs.extend(_individual_recommendations(report))
    recs.extend(_agency_recommendations(report))
    logger.info(f"Recommendations: {len(recs)} generated")
    return sort_by_priority(recs)
