"""
conftest.py — Shared pytest fixtures for the ShiftGuard analytics test suite.

No database or external service fixtures are defined here.  All tests in this
suite are pure unit tests that exercise the engines in isolation, plus API
tests through FastAPI's in-process TestClient.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``shiftguard.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any shiftguard imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Rule set fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def rules():
    """
    Default business rules:
      paid hours per shift = 7.5, overtime = 1.5×, night allowance = 10 %,
      standard week = 45 h.
    """
    from shiftguard.services.business_rules import BusinessRules
    return BusinessRules()


@pytest.fixture
def make_shift():
    """Factory for ShiftRecord with sensible defaults; override any field by keyword."""
    from shiftguard.models.labor_records import ShiftRecord

    def _make(**overrides):
        fields = {
            "employee_id": "M1164899",
            "employee_name": "Sibongiseni Khumalo",
            "department": "Beauty Picking",
            "agency": "Adcorp Blu",
            "cost_centre": "3040038",
            "date": "2026-03-02",
            "hours_worked": 7.5,
            "is_night_shift": False,
            "hourly_rate": 39.34,
        }
        fields.update(overrides)
        return ShiftRecord(**fields)

    return _make


# ---------------------------------------------------------------------------
# Shared sample shift data
# ---------------------------------------------------------------------------

@pytest.fixture
def mixed_shifts(make_shift):
    """
    Eight shifts across three departments, two agencies and three cost
    centres over two days. Lost hours per shift (baseline 7.5):

      E1 Picking    Adcorp   3040034  03-02  6.0  → 1.5
      E2 Picking    Adcorp   3040034  03-02  7.5  → 0
      E3 Inventory  Workforce 3040034 03-02  4.0  → 3.5  (high alert)
      E4 Ecom       Workforce 3040040 03-02  9.0  → 0    (overtime)
      E1 Picking    Adcorp   3040034  03-03  5.0  → 2.5  (medium alert)
      E2 Picking    Adcorp   3040034  03-03  7.0  → 0.5
      E3 Inventory  Workforce 3040034 03-03  7.5  → 0
      E5 Beauty     Adcorp   3040038  03-03  2.5  → 5.0  (high alert)
    """
    return [
        make_shift(employee_id="E1", employee_name="Anele", department="Picking",
                   agency="Adcorp Blu", cost_centre="3040034", date="2026-03-02",
                   hours_worked=6.0, hourly_rate=40.0),
        make_shift(employee_id="E2", employee_name="Bongani", department="Picking",
                   agency="Adcorp Blu", cost_centre="3040034", date="2026-03-02",
                   hours_worked=7.5, hourly_rate=40.0),
        make_shift(employee_id="E3", employee_name="Caro", department="Inventory",
                   agency="Workforce", cost_centre="3040034", date="2026-03-02",
                   hours_worked=4.0, hourly_rate=50.0),
        make_shift(employee_id="E4", employee_name="Dineo", department="Ecom",
                   agency="Workforce", cost_centre="3040040", date="2026-03-02",
                   hours_worked=9.0, hourly_rate=30.0, is_night_shift=True),
        make_shift(employee_id="E1", employee_name="Anele", department="Picking",
                   agency="Adcorp Blu", cost_centre="3040034", date="2026-03-03",
                   hours_worked=5.0, hourly_rate=40.0),
        make_shift(employee_id="E2", employee_name="Bongani", department="Picking",
                   agency="Adcorp Blu", cost_centre="3040034", date="2026-03-03",
                   hours_worked=7.0, hourly_rate=40.0),
        make_shift(employee_id="E3", employee_name="Caro", department="Inventory",
                   agency="Workforce", cost_centre="3040034", date="2026-03-03",
                   hours_worked=7.5, hourly_rate=50.0),
        make_shift(employee_id="E5", employee_name="Eli", department="Beauty Picking",
                   agency="Adcorp Blu", cost_centre="3040038", date="2026-03-03",
                   hours_worked=2.5, hourly_rate=20.0),
    ]


@pytest.fixture
def raw_shift_rows():
    """Raw camelCase payload rows as delivered by the ingestion layer."""
    return [
        {
            "employeeId": "M1164899",
            "employeeName": "Sibongiseni Ernest Khumalo",
            "department": "Beauty Picking",
            "agency": "Adcorp Blu",
            "costCentre": "3040038",
            "date": "2026-03-02",
            "totalHours": 6.0,
            "isNightShift": False,
            "hourlyRate": 39.34,
        },
        {
            "employeeId": "M1162371",
            "employeeName": "Thabo Kgatuke",
            "department": "Inventory",
            "agency": "Adcorp Blu",
            "costCentre": "3040034",
            "date": "2026-03-02",
            "totalHours": "7.5",
            "isNightShift": "true",
            "hourlyRate": 39.34,
        },
    ]
