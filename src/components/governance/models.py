"""
Governance component - Input/Output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Platform aliases accepted in query strings
PLATFORM_ALIASES = {"dv360": "Google DV360"}

SCORE_REQUIRED_FIELDS = ("ruleId", "platform", "countryId", "brandId", "score", "month")


def normalise_platform(platform: str | None) -> str | None:
    if platform is None:
        return None
    return PLATFORM_ALIASES.get(platform.strip().lower(), platform)


@dataclass(frozen=True)
class ScoreInput:
    """Raw JSON body; required fields are checked by the component."""

    payload: dict[str, Any]


@dataclass(frozen=True)
class ChangeRequestInput:
    score_id: int
    requested_score: int
    comments: str = ""
    user_id: int | None = None


@dataclass(frozen=True)
class ChangeRequestReview:
    request_id: int
    status: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class RatingInput:
    criterion_id: int
    country_id: int
    brand_id: int
    rating: int
    month: str


@dataclass(frozen=True)
class GovernanceOutput:
    success: bool
    item: Any = None
    error: str | None = None
    error_code: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
