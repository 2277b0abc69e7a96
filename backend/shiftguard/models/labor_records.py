"""
Labor analytics record types.

Input records (``ShiftRecord``, ``EmployeeRecord``, ``CostCentre``) are frozen;
derived records are built once by the engines and never mutated afterwards.
Every record serialises to a plain dict via ``to_dict()`` for the API layer.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional


class EfficiencyStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_IMPROVEMENT = "needs_improvement"
    POOR = "poor"


class AlertSeverity(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"


class Priority(IntEnum):
    """Recommendation priority. Ordered so that sorting by value is meaningful."""
    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.lower()


class RecommendationCategory(str, Enum):
    DEPARTMENT_EFFICIENCY = "department_efficiency"
    INDIVIDUAL_PERFORMANCE = "individual_performance"
    AGENCY_PERFORMANCE = "agency_performance"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


def _plain(value: Any) -> Any:
    """Recursively turn enums into their values so dicts are JSON-ready."""
    if isinstance(value, Priority):
        return value.label
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ShiftRecord(_Serializable):
    employee_id: str
    employee_name: str
    department: str
    agency: str
    cost_centre: str
    date: str                       # ISO YYYY-MM-DD, or "unknown"
    hours_worked: float = 0.0
    is_night_shift: bool = False
    hourly_rate: float = 0.0
    employee_number: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class EmployeeRecord(_Serializable):
    """One roster row, as imported from the HR spreadsheet."""
    employee_number: str
    name: str
    position: str
    department: str
    agency: str
    cost_centre: Optional[str] = None
    hourly_rate: float = 0.0
    bill_rate: float = 0.0
    rate_group: Optional[str] = None


@dataclass(frozen=True)
class CostCentre(_Serializable):
    id: str
    name: str
    departments: tuple = ()


# ---------------------------------------------------------------------------
# Derived — calculator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CostBreakdown(_Serializable):
    employee_id: str
    employee_name: str
    department: str
    agency: str
    cost_centre: str
    date: str
    hourly_rate: float
    hours_worked: float
    regular_hours: float
    overtime_hours: float
    night_shift_hours: float
    regular_cost: float
    overtime_cost: float
    night_allowance: float
    total_cost: float


# ---------------------------------------------------------------------------
# Derived — aggregator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LostHoursEntry(_Serializable):
    employee_id: str
    employee_name: str
    employee_number: Optional[str]
    department: str
    agency: str
    cost_centre: str
    date: str
    hourly_rate: float
    scheduled_hours: float
    actual_hours: float
    lost_hours: float
    lost_cost: float
    efficiency: float
    status: EfficiencyStatus


@dataclass(frozen=True)
class AggregateBucket(_Serializable):
    lost_hours: float = 0.0
    lost_cost: float = 0.0
    employees: int = 0
    # Department buckets only
    scheduled_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    efficiency: Optional[float] = None


@dataclass(frozen=True)
class Alert(_Serializable):
    employee: str
    department: str
    lost_hours: float
    cost: float
    date: str
    severity: AlertSeverity
    alert_type: str = "high_lost_hours"


@dataclass(frozen=True)
class EfficiencyMetrics(_Serializable):
    overall_efficiency: float = 0.0
    total_scheduled_hours: float = 0.0
    total_actual_hours: float = 0.0
    department_efficiency: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class LostHoursReport(_Serializable):
    total_lost_hours: float = 0.0
    total_lost_cost: float = 0.0
    shift_count: int = 0
    by_department: Dict[str, AggregateBucket] = field(default_factory=dict)
    by_agency: Dict[str, AggregateBucket] = field(default_factory=dict)
    by_cost_centre: Dict[str, AggregateBucket] = field(default_factory=dict)
    daily_breakdown: Dict[str, AggregateBucket] = field(default_factory=dict)
    entries: List[LostHoursEntry] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)
    efficiency: EfficiencyMetrics = field(default_factory=EfficiencyMetrics)


# ---------------------------------------------------------------------------
# Derived — recommendations, trends, summaries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Recommendation(_Serializable):
    category: RecommendationCategory
    subject: str
    action: str
    priority: Priority
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TrendPoint(_Serializable):
    date: str
    lost_hours: float
    cost: float
    shifts: int
    employees: int
    departments: int
    average_per_employee: float
    efficiency: float
    direction: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class EmployeeLostHoursSummary(_Serializable):
    employee_id: str
    shifts_worked: int = 0
    total_lost_hours: float = 0.0
    total_lost_cost: float = 0.0
    average_efficiency: float = 0.0
    recent_lost_hours: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class DepartmentAnalysis(_Serializable):
    total_shifts: int
    total_lost_hours: float
    total_lost_cost: float
    average_efficiency: float
    departments: Dict[str, AggregateBucket] = field(default_factory=dict)
    top_issues: List[LostHoursEntry] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    trends: List[TrendPoint] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Derived — roster cost analysis
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GroupCost(_Serializable):
    count: int = 0
    total_cost: float = 0.0


@dataclass(frozen=True)
class EmployeeWeeklyCost(_Serializable):
    employee_number: str
    name: str
    position: str
    department: str
    agency: str
    hourly_rate: float
    weekly_cost: float


@dataclass(frozen=True)
class RosterCostAnalysis(_Serializable):
    total_employees: int = 0
    total_weekly_cost: float = 0.0
    average_hourly_rate: float = 0.0
    by_position: Dict[str, GroupCost] = field(default_factory=dict)
    by_department: Dict[str, GroupCost] = field(default_factory=dict)
    by_agency: Dict[str, GroupCost] = field(default_factory=dict)
    employees: List[EmployeeWeeklyCost] = field(default_factory=list)
