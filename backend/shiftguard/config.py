"""
Labor analytics configuration — single source of truth for thresholds,
report sizes and service settings.

Import from here in all engines and routes rather than hardcoding values.
Business rule constants (paid hours, overtime rate, ...) live on
``BusinessRules`` instead, since they are swapped per deployment.
"""
from __future__ import annotations

import os

# Load .env file automatically in dev (no-op if file missing)
from dotenv import load_dotenv

load_dotenv()


# ── Efficiency status thresholds (percent, highest first) ─────────────────────
EFFICIENCY_STATUS_THRESHOLDS: list[tuple[float, str]] = [
    (95.0, "excellent"),
    (90.0, "good"),
    (85.0, "fair"),
    (80.0, "needs_improvement"),
]
EFFICIENCY_STATUS_FLOOR: str = "poor"


# ── Alerts ────────────────────────────────────────────────────────────────────
# A shift raises an alert when its lost hours exceed this value
ALERT_LOST_HOURS_THRESHOLD: float = 2.0
# Above this the alert is "high", otherwise "medium"
ALERT_HIGH_SEVERITY_THRESHOLD: float = 3.0


# ── Recommendation heuristics ─────────────────────────────────────────────────
DEPARTMENT_EFFICIENCY_TRIGGER: float = 85.0
DEPARTMENT_EFFICIENCY_HIGH_PRIORITY: float = 80.0
DEPARTMENT_TARGET_EFFICIENCY: float = 90.0

INDIVIDUAL_REVIEW_CANDIDATES: int = 5
INDIVIDUAL_LOST_HOURS_TRIGGER: float = 2.0
INDIVIDUAL_LOST_HOURS_HIGH_PRIORITY: float = 3.0

AGENCY_AVG_LOST_HOURS_TRIGGER: float = 1.5
AGENCY_AVG_LOST_HOURS_HIGH_PRIORITY: float = 2.0

# Monthly savings projection: a month is approximated as four weekly periods.
# Not derived from the report's actual period length.
WEEKS_PER_MONTH_APPROXIMATION: int = 4


# ── Report sizes ──────────────────────────────────────────────────────────────
DEPARTMENT_TOP_ISSUES: int = 10
EMPLOYEE_RECENT_SHIFTS: int = 3


# ── Timeframes (days) ─────────────────────────────────────────────────────────
TIMEFRAME_DAYS: dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
}
DEFAULT_TIMEFRAME: str = "30d"


# ── Placeholder for missing identifying fields ────────────────────────────────
UNKNOWN_KEY: str = "unknown"


# ── Service settings ──────────────────────────────────────────────────────────
SERVICE_VERSION: str = "1.0.0"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"
EXPORT_DIR: str = os.getenv("EXPORT_DIR", "/tmp/shiftguard-exports")
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
    if o.strip()
]
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
