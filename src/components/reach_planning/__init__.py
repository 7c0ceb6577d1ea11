"""
Reach planning component - reach sufficiency sheet validation and import.
"""

from ._impl import COLUMNS, REQUIRED_COLUMNS, ReachPlanningValidator, is_valid_percentage, transform_record
from .component import run_import_reach, run_validate_reach
from .models import (
    ReachColumn,
    ReachImportInput,
    ReachImportOutput,
    ReachValidateInput,
    ReachValidateOutput,
)
from .ports import CountryLookupPort, LastUpdateLookupPort, MediaSufficiencyRepoPort

__all__ = [
    "run_validate_reach",
    "run_import_reach",
    "COLUMNS",
    "REQUIRED_COLUMNS",
    "ReachPlanningValidator",
    "is_valid_percentage",
    "transform_record",
    "ReachColumn",
    "ReachImportInput",
    "ReachImportOutput",
    "ReachValidateInput",
    "ReachValidateOutput",
    "CountryLookupPort",
    "LastUpdateLookupPort",
    "MediaSufficiencyRepoPort",
]
