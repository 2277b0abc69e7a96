"""
report_export.py — Excel workbook export of a lost-hours report.

Sheets: Summary, Departments, Agencies, Cost Centres, Daily, Detail, Alerts,
Recommendations. Values are written unrounded; rounding is a cell format.
"""
import logging
import os
from typing import Dict, List, Optional

import xlsxwriter

from shiftguard import config
from shiftguard.models.labor_records import AggregateBucket, LostHoursReport, Recommendation

logger = logging.getLogger("shiftguard-export")


def _write_buckets(wb, title: str, key_label: str, buckets: Dict[str, AggregateBucket], fmts, with_efficiency=False):
    ws = wb.add_worksheet(title)
    ws.set_column("A:A", 28)
    ws.set_column("B:G", 16)
    headers = [key_label, "Lost Hours", "Lost Cost", "Employees"]
    if with_efficiency:
        headers += ["Scheduled Hours", "Actual Hours", "Efficiency %"]
    ws.write_row(0, 0, headers, fmts["hdr"])
    for r, (key, b) in enumerate(buckets.items(), 1):
        ws.write(r, 0, key, fmts["normal"])
        ws.write(r, 1, b.lost_hours, fmts["hours"])
        ws.write(r, 2, b.lost_cost, fmts["money"])
        ws.write(r, 3, b.employees, fmts["normal"])
        if with_efficiency:
            ws.write(r, 4, b.scheduled_hours or 0.0, fmts["hours"])
            ws.write(r, 5, b.actual_hours or 0.0, fmts["hours"])
            ws.write(r, 6, b.efficiency or 0.0, fmts["pct"])
    return ws


def export_lost_hours_workbook(
    report: LostHoursReport,
    recommendations: Optional[List[Recommendation]] = None,
    path: Optional[str] = None,
    title: str = "Lost Hours Report",
) -> str:
    """Write ``report`` (and optional recommendations) to an .xlsx file and return its path."""
    if path is None:
        os.makedirs(config.EXPORT_DIR, exist_ok=True)
        path = os.path.join(config.EXPORT_DIR, "lost_hours_report.xlsx")

    wb = xlsxwriter.Workbook(path)
    fmts = {
        "hdr": wb.add_format({"bold": True, "bg_color": "#14141E", "font_color": "#FFFFFF",
                              "border": 1, "font_size": 10}),
        "title": wb.add_format({"bold": True, "font_size": 14}),
        "normal": wb.add_format({"border": 1, "font_size": 9}),
        "money": wb.add_format({"num_format": "#,##0.00", "border": 1}),
        "hours": wb.add_format({"num_format": "0.00", "border": 1}),
        "pct": wb.add_format({"num_format": "0.0", "border": 1}),
        "high": wb.add_format({"bold": True, "font_color": "#B00020", "border": 1}),
    }

    # ── Sheet 1: Summary ─────────────────────────────────────────────────────
    ws = wb.add_worksheet("Summary")
    ws.set_column("A:A", 32)
    ws.set_column("B:B", 18)
    ws.write("A1", title, fmts["title"])
    eff = report.efficiency
    rows = [
        ("Shifts analysed", report.shift_count, fmts["normal"]),
        ("Shifts with lost hours", len(report.entries), fmts["normal"]),
        ("Total lost hours", report.total_lost_hours, fmts["hours"]),
        ("Total lost cost", report.total_lost_cost, fmts["money"]),
        ("Scheduled hours", eff.total_scheduled_hours, fmts["hours"]),
        ("Actual hours", eff.total_actual_hours, fmts["hours"]),
        ("Overall efficiency %", eff.overall_efficiency, fmts["pct"]),
        ("Alerts", len(report.alerts), fmts["normal"]),
    ]
    ws.write_row(2, 0, ["Metric", "Value"], fmts["hdr"])
    for i, (label, value, fmt) in enumerate(rows):
        ws.write(3 + i, 0, label, fmts["normal"])
        ws.write(3 + i, 1, value, fmt)

    # ── Bucket sheets ────────────────────────────────────────────────────────
    _write_buckets(wb, "Departments", "Department", report.by_department, fmts, with_efficiency=True)
    _write_buckets(wb, "Agencies", "Agency", report.by_agency, fmts)
    _write_buckets(wb, "Cost Centres", "Cost Centre", report.by_cost_centre, fmts)
    _write_buckets(wb, "Daily", "Date", report.daily_breakdown, fmts)

    # ── Detail ───────────────────────────────────────────────────────────────
    ws = wb.add_worksheet("Detail")
    ws.set_column("A:K", 15)
    ws.write_row(0, 0, [
        "Employee", "Department", "Agency", "Cost Centre", "Date", "Scheduled",
        "Actual", "Lost Hours", "Lost Cost", "Efficiency %", "Status",
    ], fmts["hdr"])
    for r, e in enumerate(report.entries, 1):
        ws.write_row(r, 0, [e.employee_name, e.department, e.agency, e.cost_centre, e.date], fmts["normal"])
        ws.write(r, 5, e.scheduled_hours, fmts["hours"])
        ws.write(r, 6, e.actual_hours, fmts["hours"])
        ws.write(r, 7, e.lost_hours, fmts["hours"])
        ws.write(r, 8, e.lost_cost, fmts["money"])
        ws.write(r, 9, e.efficiency, fmts["pct"])
        ws.write(r, 10, e.status.value, fmts["normal"])

    # ── Alerts ───────────────────────────────────────────────────────────────
    ws = wb.add_worksheet("Alerts")
    ws.set_column("A:F", 16)
    ws.write_row(0, 0, ["Employee", "Department", "Date", "Lost Hours", "Cost", "Severity"], fmts["hdr"])
    for r, a in enumerate(report.alerts, 1):
        ws.write_row(r, 0, [a.employee, a.department, a.date], fmts["normal"])
        ws.write(r, 3, a.lost_hours, fmts["hours"])
        ws.write(r, 4, a.cost, fmts["money"])
        ws.write(r, 5, a.severity.value, fmts["high"] if a.severity.value == "high" else fmts["normal"])

    # ── Recommendations ──────────────────────────────────────────────────────
    ws = wb.add_worksheet("Recommendations")
    ws.set_column("A:B", 24)
    ws.set_column("C:C", 50)
    ws.set_column("D:D", 10)
    ws.write_row(0, 0, ["Category", "Subject", "Action", "Priority"], fmts["hdr"])
    for r, rec in enumerate(recommendations or [], 1):
        ws.write_row(r, 0, [rec.category.value, rec.subject, rec.action], fmts["normal"])
        ws.write(r, 3, rec.priority.label, fmts["high"] if rec.priority.label == "high" else fmts["normal"])

    wb.close()
    logger.info(f"Lost-hours workbook generated: {path}")
    return path
