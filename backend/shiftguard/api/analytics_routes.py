"""
Labor analytics routes — thin orchestration layer over the analytics engines.

POST /api/v1/labor/shift-cost           — one shift → cost breakdown
POST /api/v1/labor/lost-hours           — shifts → lost-hours report
POST /api/v1/labor/lost-hours/export    — shifts → .xlsx workbook
POST /api/v1/labor/recommendations      — shifts → prioritised recommendations
POST /api/v1/labor/trends               — shifts → day-over-day trend points
POST /api/v1/labor/department-analysis  — shifts → department analysis bundle
POST /api/v1/labor/employee-analysis    — roster → weekly cost analysis
GET  /api/v1/labor/rules                — active business rule set
"""
import logging
import os
import uuid
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from shiftguard import config
from shiftguard.api.schemas import (
    CostCentreIn,
    DepartmentAnalysisRequest,
    EmployeeAnalysisRequest,
    RulesMixin,
    ShiftBatchRequest,
    ShiftCostRequest,
)
from shiftguard.models.labor_records import CostCentre, ShiftRecord
from shiftguard.services.business_rules import (
    DEFAULT_COST_CENTRES,
    BusinessRules,
    InvalidRuleSetError,
)
from shiftguard.services.labor_engine import compute_shift_cost
from shiftguard.services.lost_hours_engine import aggregate_lost_hours
from shiftguard.services.recommendation_engine import generate_recommendations
from shiftguard.services.report_export import export_lost_hours_workbook
from shiftguard.services.shift_validation import (
    ShiftValidationError,
    ensure_valid_shift,
    filter_valid_shifts,
    normalise_employee,
    normalise_shift,
    validate_employee,
)
from shiftguard.services.trend_engine import analyze_trends
from shiftguard.services.workforce_report_engine import department_analysis, employee_cost_analysis

router = APIRouter(prefix="/api/v1/labor", tags=["Labor Analytics"])
logger = logging.getLogger("shiftguard-routes")


@lru_cache(maxsize=1)
def get_base_rules() -> BusinessRules:
    """Deployment rule set, read once from the environment."""
    return BusinessRules.from_env()


def _rules_for(req: RulesMixin, base: BusinessRules) -> BusinessRules:
    try:
        return base.with_overrides(req.rules)
    except InvalidRuleSetError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _cost_centres(items: Optional[List[CostCentreIn]]):
    if items is None:
        return DEFAULT_COST_CENTRES
    return tuple(CostCentre(id=c.id, name=c.name, departments=tuple(c.departments)) for c in items)


def _shifts_for(req: ShiftBatchRequest) -> Tuple[List[ShiftRecord], List[Dict[str, Any]]]:
    if not req.strict:
        return [normalise_shift(row) for row in req.shifts], []
    result = filter_valid_shifts(req.shifts, _cost_centres(req.cost_centres))
    return result.valid, result.rejected


def _remove_export(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Could not remove export {path}: {e}")


@router.get("/rules")
def get_rules(base: BusinessRules = Depends(get_base_rules)):
    return base.to_dict()


@router.post("/shift-cost")
def shift_cost(req: ShiftCostRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    if req.strict:
        try:
            shift = ensure_valid_shift(req.shift)
        except ShiftValidationError as e:
            raise HTTPException(status_code=422, detail=e.problems)
    else:
        shift = normalise_shift(req.shift)
    return compute_shift_cost(shift, rules).to_dict()


@router.post("/lost-hours")
def lost_hours(req: ShiftBatchRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    shifts, rejected = _shifts_for(req)
    report = aggregate_lost_hours(shifts, rules)
    return {"report": report.to_dict(), "rejected": rejected}


@router.post("/lost-hours/export")
def lost_hours_export(req: ShiftBatchRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    shifts, rejected = _shifts_for(req)
    report = aggregate_lost_hours(shifts, rules)
    os.makedirs(config.EXPORT_DIR, exist_ok=True)
    filename = f"LostHours_{uuid.uuid4().hex[:8]}.xlsx"
    path = export_lost_hours_workbook(
        report,
        generate_recommendations(report),
        path=os.path.join(config.EXPORT_DIR, filename),
    )
    return FileResponse(
        path,
        filename=filename,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"X-Rejected-Rows": str(len(rejected))},
        background=BackgroundTask(_remove_export, path),
    )


@router.post("/recommendations")
def recommendations(req: ShiftBatchRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    shifts, rejected = _shifts_for(req)
    recs = generate_recommendations(aggregate_lost_hours(shifts, rules))
    return {"recommendations": [r.to_dict() for r in recs], "rejected": rejected}


@router.post("/trends")
def trends(req: ShiftBatchRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    shifts, rejected = _shifts_for(req)
    return {"trends": [p.to_dict() for p in analyze_trends(shifts, rules)], "rejected": rejected}


@router.post("/department-analysis")
def department_lost_hours(req: DepartmentAnalysisRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    shifts, rejected = _shifts_for(req)
    if req.timeframe is not None and req.as_of is None:
        raise HTTPException(status_code=422, detail="as_of is required when a timeframe is given")
    analysis = department_analysis(
        shifts, rules, department=req.department, timeframe=req.timeframe, as_of=req.as_of,
    )
    return {"analysis": analysis.to_dict(), "rejected": rejected}


@router.post("/employee-analysis")
def employee_analysis(req: EmployeeAnalysisRequest, base: BusinessRules = Depends(get_base_rules)):
    rules = _rules_for(req, base)
    rejected = []
    employees = []
    centres = _cost_centres(req.cost_centres)
    for index, row in enumerate(req.employees):
        problems = validate_employee(row, centres) if req.strict else []
        if problems:
            rejected.append({"row": index, "errors": problems})
        else:
            employees.append(normalise_employee(row))
    analysis = employee_cost_analysis(employees, rules)
    logger.info(f"Roster analysis: {analysis.total_employees} employees, {len(rejected)} rejected")
    return {"analysis": analysis.to_dict(), "rejected": rejected}
