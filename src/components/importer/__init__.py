"""
Importer component - turns validated game plan uploads into database rows.
"""

from ._impl import GamePlanImporter, ImportRowError
from .component import run_import
from .models import ImportInput, ImportOutput, ImportProgress, ImportRepos, ProgressCallback
from .registry import AUTO_CREATED_BY, AutoCreateRegistry

__all__ = [
    "run_import",
    "GamePlanImporter",
    "ImportRowError",
    "AutoCreateRegistry",
    "AUTO_CREATED_BY",
    "ImportInput",
    "ImportOutput",
    "ImportProgress",
    "ImportRepos",
    "ProgressCallback",
]
