"""
Request/response contracts for the labor analytics API.

Shift and roster rows are accepted as loose dicts (camelCase or snake_case
keys) and normalised at the boundary by ``services.shift_validation``, so a
malformed numeric field degrades to zero instead of failing the request.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CostCentreIn(BaseModel):
    id: str
    name: str = ""
    departments: List[str] = []


class RulesMixin(BaseModel):
    rules: Optional[Dict[str, Any]] = Field(
        None, description="Business rule overrides, e.g. {\"paidHoursPerShift\": 8}"
    )


class ShiftCostRequest(RulesMixin):
    shift: Dict[str, Any]
    strict: bool = False

    model_config = {"json_schema_extra": {
        "example": {
            "shift": {
                "employeeId": "M1164899",
                "employeeName": "S. Khumalo",
                "department": "Beauty Picking",
                "agency": "Adcorp Blu",
                "costCentre": "3040038",
                "date": "2026-03-02",
                "hoursWorked": 9.0,
                "isNightShift": True,
                "hourlyRate": 39.34,
            },
        }
    }}


class ShiftBatchRequest(RulesMixin):
    shifts: List[Dict[str, Any]] = []
    strict: bool = Field(False, description="Reject invalid rows instead of normalising them")
    cost_centres: Optional[List[CostCentreIn]] = Field(
        None, description="Cost-centre reference data for strict validation"
    )


class DepartmentAnalysisRequest(ShiftBatchRequest):
    department: Optional[str] = None
    timeframe: Optional[str] = Field(None, description="7d | 30d | 90d")
    as_of: Optional[date] = None


class EmployeeAnalysisRequest(RulesMixin):
    employees: List[Dict[str, Any]] = []
    strict: bool = False
    cost_centres: Optional[List[CostCentreIn]] = None


class HealthResponse(BaseModel):
    status: str
    version: str
