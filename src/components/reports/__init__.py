"""
Reports component - user and admin dashboards.
"""

from ._aggregate import (
    admin_overview,
    cycle_year,
    empty_reach_summary,
    financial_cycles,
    media_sufficiency_summary,
    reach_analysis,
    reach_by_campaign,
    reach_summary,
)
from .component import run_admin_report, run_media_sufficiency_report, run_reach_report
from .models import AdminReportInput, MediaSufficiencyReportInput, ReachReportInput, ReportOutput

__all__ = [
    "run_media_sufficiency_report",
    "run_reach_report",
    "run_admin_report",
    "media_sufficiency_summary",
    "reach_summary",
    "reach_by_campaign",
    "reach_analysis",
    "empty_reach_summary",
    "financial_cycles",
    "admin_overview",
    "cycle_year",
    "MediaSufficiencyReportInput",
    "ReachReportInput",
    "AdminReportInput",
    "ReportOutput",
]
