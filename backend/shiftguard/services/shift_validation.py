"""
shift_validation.py — Boundary normalisation and validation for shift and roster data.

The analytics engines are permissive: they never reject a record. Anything
that must be *rejected* (negative hours, unknown cost centres, incomplete
roster rows) is decided here, at the ingestion boundary, before records reach
the engines.

Two layers:
  - normalise_*  : raw dict (camelCase or snake_case keys) → typed record.
                   Never fails; missing numerics → 0, missing identifiers → "unknown".
  - validate_*   : raw dict → list of human-readable problems (empty = valid).
                   ``filter_valid_shifts`` splits a batch into accepted records
                   and rejected rows without aborting the batch.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from shiftguard import config
from shiftguard.models.labor_records import CostCentre, EmployeeRecord, ShiftRecord
from shiftguard.services.business_rules import DEFAULT_COST_CENTRES
from shiftguard.services.labor_engine import safe_float
from shiftguard.services.trend_engine import parse_iso_date

logger = logging.getLogger("shiftguard-validation")

MAX_SHIFT_HOURS: float = 24.0

# Field name → accepted raw keys, first match wins
_SHIFT_FIELDS: Dict[str, tuple] = {
    "employee_id": ("employee_id", "employeeId"),
    "employee_name": ("employee_name", "employeeName", "name"),
    "employee_number": ("employee_number", "employeeNumber"),
    "department": ("department",),
    "agency": ("agency",),
    "cost_centre": ("cost_centre", "costCentre", "cost_center", "costCenter"),
    "date": ("date", "shift_date", "calculationDate"),
    "hours_worked": ("hours_worked", "hoursWorked", "totalHours", "hours"),
    "is_night_shift": ("is_night_shift", "isNightShift", "night_shift"),
    "hourly_rate": ("hourly_rate", "hourlyRate", "rate"),
    "position": ("position",),
}

_EMPLOYEE_FIELDS: Dict[str, tuple] = {
    "employee_number": ("employee_number", "employeeNumber"),
    "name": ("name", "employee_name", "employeeName"),
    "position": ("position",),
    "department": ("department",),
    "agency": ("agency",),
    "cost_centre": ("cost_centre", "costCentre"),
    "hourly_rate": ("hourly_rate", "hourlyRate"),
    "bill_rate": ("bill_rate", "billRate"),
    "rate_group": ("rate_group", "rateGroup"),
}

REQUIRED_SHIFT_FIELDS = ("employee_id", "department", "agency", "cost_centre", "date")
REQUIRED_EMPLOYEE_FIELDS = ("employee_number", "name", "position", "department", "agency")

_TRUE_STRINGS = {"true", "yes", "y", "1", "night"}


class ShiftValidationError(ValueError):
    """Raised by ``ensure_valid_shift`` when a single record fails validation."""

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


@dataclass
class ValidationResult:
    valid: List[ShiftRecord] = field(default_factory=list)
    rejected: List[Dict[str, Any]] = field(default_factory=list)   # {"row", "errors"}


def _pick(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def normalise_date(value: Any) -> str:
    """ISO ``YYYY-MM-DD`` for anything readable as a date; raw text otherwise; "unknown" if empty."""
    parsed = parse_iso_date(value)
    if parsed is not None:
        return parsed.isoformat()
    return _text(value) or config.UNKNOWN_KEY


def normalise_shift(raw: Mapping[str, Any]) -> ShiftRecord:
    """Coerce one raw shift payload into a ``ShiftRecord`` without rejecting it."""
    get = {name: _pick(raw, keys) for name, keys in _SHIFT_FIELDS.items()}
    employee_id = _text(get["employee_id"]) or _text(get["employee_number"]) or config.UNKNOWN_KEY
    return ShiftRecord(
        employee_id=employee_id,
        employee_name=_text(get["employee_name"]) or employee_id,
        department=_text(get["department"]) or config.UNKNOWN_KEY,
        agency=_text(get["agency"]) or config.UNKNOWN_KEY,
        cost_centre=_text(get["cost_centre"]) or config.UNKNOWN_KEY,
        date=normalise_date(get["date"]),
        hours_worked=safe_float(get["hours_worked"]),
        is_night_shift=_flag(get["is_night_shift"]),
        hourly_rate=safe_float(get["hourly_rate"]),
        employee_number=_text(get["employee_number"]),
        position=_text(get["position"]),
    )


def _numeric_problem(label: str, value: Any, required: bool, maximum: Optional[float] = None) -> Optional[str]:
    if value is None or value == "":
        return f"Missing {label}" if required else None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return f"Invalid {label}: {value!r}"
    if number != number:
        return f"Invalid {label}: NaN"
    if number < 0:
        return f"{label.capitalize()} must not be negative"
    if maximum is not None and number > maximum:
        return f"{label.capitalize()} exceeds {maximum:g}"
    return None


def validate_shift(
    raw: Mapping[str, Any],
    cost_centres: Optional[Iterable[CostCentre]] = DEFAULT_COST_CENTRES,
) -> List[str]:
    """
    Return the problems that should keep ``raw`` out of the analytics.

    ``cost_centres=None`` disables the cost-centre reference check.
    """
    problems: List[str] = []
    missing = [
        name for name in REQUIRED_SHIFT_FIELDS
        if _text(_pick(raw, _SHIFT_FIELDS[name])) is None
    ]
    if missing:
        problems.append(f"Missing required fields: {', '.join(missing)}")

    for name, label, maximum in (
        ("hours_worked", "hours worked", MAX_SHIFT_HOURS),
        ("hourly_rate", "hourly rate", None),
    ):
        problem = _numeric_problem(label, _pick(raw, _SHIFT_FIELDS[name]), True, maximum)
        if problem:
            problems.append(problem)

    raw_date = _pick(raw, _SHIFT_FIELDS["date"])
    if raw_date is not None and parse_iso_date(raw_date) is None:
        problems.append(f"Invalid date: {raw_date!r}")

    centre = _text(_pick(raw, _SHIFT_FIELDS["cost_centre"]))
    if centre and cost_centres is not None:
        valid_ids = {c.id for c in cost_centres}
        if centre not in valid_ids:
            problems.append(f"Invalid cost centre: {centre}")
    return problems


def ensure_valid_shift(
    raw: Mapping[str, Any],
    cost_centres: Optional[Iterable[CostCentre]] = DEFAULT_COST_CENTRES,
) -> ShiftRecord:
    """Validate and normalise a single shift, raising ``ShiftValidationError`` on problems."""
    problems = validate_shift(raw, cost_centres)
    if problems:
        raise ShiftValidationError(problems)
    return normalise_shift(raw)


def filter_valid_shifts(
    rows: Iterable[Mapping[str, Any]],
    cost_centres: Optional[Iterable[CostCentre]] = DEFAULT_COST_CENTRES,
) -> ValidationResult:
    """Split a batch into accepted ``ShiftRecord`` objects and rejected rows (by index)."""
    centres = list(cost_centres) if cost_centres is not None else None
    result = ValidationResult()
    for index, raw in enumerate(rows):
        problems = validate_shift(raw, centres)
        if problems:
            result.rejected.append({"row": index, "errors": problems})
        else:
            result.valid.append(normalise_shift(raw))
    if result.rejected:
        logger.warning(
            f"Shift validation rejected {len(result.rejected)} of "
            f"{len(result.valid) + len(result.rejected)} rows"
        )
    return result


# ---------------------------------------------------------------------------
# Roster rows
# ---------------------------------------------------------------------------

def normalise_employee(raw: Mapping[str, Any]) -> EmployeeRecord:
    get = {name: _pick(raw, keys) for name, keys in _EMPLOYEE_FIELDS.items()}
    number = _text(get["employee_number"]) or config.UNKNOWN_KEY
    return EmployeeRecord(
        employee_number=number,
        name=_text(get["name"]) or number,
        position=_text(get["position"]) or config.UNKNOWN_KEY,
        department=_text(get["department"]) or config.UNKNOWN_KEY,
        agency=_text(get["agency"]) or config.UNKNOWN_KEY,
        cost_centre=_text(get["cost_centre"]),
        hourly_rate=safe_float(get["hourly_rate"]),
        bill_rate=safe_float(get["bill_rate"]),
        rate_group=_text(get["rate_group"]),
    )


def validate_employee(
    raw: Mapping[str, Any],
    cost_centres: Optional[Iterable[CostCentre]] = DEFAULT_COST_CENTRES,
) -> List[str]:
    """Roster row checks: required fields, a positive hourly rate, a known cost centre."""
    problems: List[str] = []
    missing = [
        name for name in REQUIRED_EMPLOYEE_FIELDS
        if _text(_pick(raw, _EMPLOYEE_FIELDS[name])) is None
    ]
    if missing:
        problems.append(f"Missing required fields: {', '.join(missing)}")

    rate = _pick(raw, _EMPLOYEE_FIELDS["hourly_rate"])
    try:
        if float(rate) <= 0:
            problems.append("Hourly rate must be positive")
    except (TypeError, ValueError):
        problems.append("Invalid hourly rate")

    centre = _text(_pick(raw, _EMPLOYEE_FIELDS["cost_centre"]))
    if centre and cost_centres is not None and centre not in {c.id for c in cost_centres}:
        problems.append(f"Invalid cost centre: {centre}")
    return problems


# ---------------------------------------------------------------------------
# Timeframes
# ---------------------------------------------------------------------------

def timeframe_start(timeframe: Optional[str], as_of: date) -> date:
    """First date included in ``timeframe`` ("7d", "30d", "90d"; anything else → 30d)."""
    days = config.TIMEFRAME_DAYS.get(
        timeframe or config.DEFAULT_TIMEFRAME,
        config.TIMEFRAME_DAYS[config.DEFAULT_TIMEFRAME],
    )
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    return as_of - timedelta(days=days)


def filter_by_timeframe(
    shifts: Iterable[ShiftRecord], timeframe: Optional[str], as_of: date
) -> List[ShiftRecord]:
    """
    Keep the shifts dated between the timeframe start and ``as_of`` inclusive.

    ``as_of`` is explicit so the same call always returns the same records.
    Shifts without a readable date are dropped.
    """
    start = timeframe_start(timeframe, as_of)
    end = as_of.date() if isinstance(as_of, datetime) else as_of
    kept = []
    for shift in shifts:
        day = parse_iso_date(shift.date)
        if day is not None and start <= day <= end:
            kept.append(shift)
    return kept
