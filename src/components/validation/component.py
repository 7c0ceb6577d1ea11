from src.rules.models import ValidationRules

from ._impl import MediaSufficiencyValidator, can_import, validation_summary
from .models import ValidateInput, ValidateOutput


def run_validate(inp: ValidateInput, config: ValidationRules) -> ValidateOutput:
    """Validate staged game plan records against the master data snapshot."""
    validator = MediaSufficiencyValidator(
        inp.master_data,
        config,
        auto_create=inp.auto_create,
        financial_cycle=inp.financial_cycle,
    )
    issues = validator.validate_all(inp.records, inp.row_offset)
    return ValidateOutput(
        issues=issues,
        summary=validation_summary(issues),
        can_import=can_import(issues),
    )
