"""
ShiftGuard Labor Analytics API
FastAPI service exposing shift costing, lost-hours reports, recommendations
and trends. Stateless: every request carries the shift records to analyse.
"""
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftguard import config
from shiftguard.api.analytics_routes import router as analytics_router
from shiftguard.api.schemas import HealthResponse
from shiftguard.services.logging_config import setup_logging
from shiftguard.services.middleware import RequestTimingMiddleware
from shiftguard.services.perf_monitor import tracker as report_tracker

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_JSON)
logger = logging.getLogger("shiftguard-api")

# Record process start time for uptime calculation
_PROCESS_START = time.monotonic()

app = FastAPI(
    title="ShiftGuard Labor Analytics API",
    version=config.SERVICE_VERSION,
    description="Shift costing, lost-hours analytics and workforce efficiency reporting",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)

app.include_router(analytics_router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="active", version=config.SERVICE_VERSION)


@app.get("/metrics")
async def metrics():
    """Report counts and average computation time per report kind."""
    snapshot = report_tracker.get_metrics()
    return {
        "uptime_seconds": round(time.monotonic() - _PROCESS_START, 1),
        **snapshot,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("shiftguard.main:app", host=config.HOST, port=config.PORT)
