"""
Validation component - media sufficiency upload checks.

Validates staged game plan rows against a master data snapshot, suggests
header mappings and checks import readiness.
"""

from ._impl import (
    EXPECTED_COLUMNS,
    MONTH_COLUMNS,
    MediaSufficiencyValidator,
    can_import,
    column_value,
    is_record_empty,
    validation_summary,
)
from .component import run_validate
from .mapping import suggest_field_mappings
from .master_data import (
    MasterDataIndex,
    build_master_data,
    empty_master_data,
    load_master_data,
    master_data_from_csv,
    save_master_data,
)
from .models import (
    FieldMappingSuggestion,
    ImportReadiness,
    ValidateInput,
    ValidateOutput,
    ValidationIssue,
    ValidationSummary,
)
from .ports import MasterDataSourcePort
from .readiness import check_import_readiness

__all__ = [
    # Entry points
    "run_validate",
    "check_import_readiness",
    "suggest_field_mappings",
    # Validator
    "EXPECTED_COLUMNS",
    "MONTH_COLUMNS",
    "MediaSufficiencyValidator",
    "can_import",
    "column_value",
    "is_record_empty",
    "validation_summary",
    # Master data
    "MasterDataIndex",
    "build_master_data",
    "empty_master_data",
    "load_master_data",
    "master_data_from_csv",
    "save_master_data",
    # Models
    "FieldMappingSuggestion",
    "ImportReadiness",
    "ValidateInput",
    "ValidateOutput",
    "ValidationIssue",
    "ValidationSummary",
    # Ports
    "MasterDataSourcePort",
]
