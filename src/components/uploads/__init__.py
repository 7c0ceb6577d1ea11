"""
Uploads component - spreadsheet parsing for bulk imports.
"""

from .parsing import (
    BUDGET_FIELDS,
    GAME_PLAN_SHEET,
    REACH_PLANNING_SHEET,
    ParsedSheet,
    UploadParseError,
    is_csv_file,
    is_excel_file,
    parse_csv,
    parse_excel_file,
    parse_game_plans_excel,
    parse_reach_planning_excel,
    parse_upload,
)

__all__ = [
    "BUDGET_FIELDS",
    "GAME_PLAN_SHEET",
    "REACH_PLANNING_SHEET",
    "ParsedSheet",
    "UploadParseError",
    "is_csv_file",
    "is_excel_file",
    "parse_csv",
    "parse_excel_file",
    "parse_game_plans_excel",
    "parse_reach_planning_excel",
    "parse_upload",
]
