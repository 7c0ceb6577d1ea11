"""
Governance component - Port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import ChangeRequest, FiveStarsCriterion, FiveStarsRating, Score


class ScoreRepoPort(Protocol):
    def get_by_id(self, score_id: int) -> Score | None: ...
    def save(self, score: Score) -> Score: ...


class ChangeRequestRepoPort(Protocol):
    def get_by_id(self, request_id: int) -> ChangeRequest | None: ...
    def save(self, request: ChangeRequest) -> ChangeRequest: ...


class FiveStarsRepoPort(Protocol):
    def get_criterion(self, criterion_id: int) -> FiveStarsCriterion | None: ...
    def upsert_rating(self, rating: FiveStarsRating) -> FiveStarsRating: ...
