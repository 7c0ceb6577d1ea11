"""
Share of voice component - competitive spend uploads per category.
"""

from ._impl import (
    ShareOfVoiceValidator,
    build_entities,
    group_by_category,
    is_valid_company_format,
    rows_from_records,
)
from .component import run_save_sov, run_validate_sov
from .models import (
    MEDIA_TYPES,
    SovGridRow,
    SovMediaType,
    SovSaveInput,
    SovSaveOutput,
    SovValidateInput,
    SovValidateOutput,
)
from .ports import ShareOfVoiceRepoPort

__all__ = [
    "run_validate_sov",
    "run_save_sov",
    "ShareOfVoiceValidator",
    "build_entities",
    "group_by_category",
    "is_valid_company_format",
    "rows_from_records",
    "MEDIA_TYPES",
    "SovGridRow",
    "SovMediaType",
    "SovSaveInput",
    "SovSaveOutput",
    "SovValidateInput",
    "SovValidateOutput",
    "ShareOfVoiceRepoPort",
]
