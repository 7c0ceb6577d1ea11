"""
Reports component - Port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from src.domain.entities import MediaSufficiency, User


class GamePlanSourcePort(Protocol):
    def list_filtered(
        self,
        filters: dict[str, Any] | None = None,
        country_ids: list[int] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...


class ReachSourcePort(Protocol):
    def list_filtered(
        self,
        last_updates: list[str] | None = None,
        country_ids: list[int] | None = None,
    ) -> list[MediaSufficiency]: ...


class ClockPort(Protocol):
    def now_utc(self) -> datetime: ...


class UserSourcePort(Protocol):
    def list_all(self) -> list[User]: ...


class LastUpdateSourcePort(Protocol):
    def list_with_counts(self) -> list[dict[str, Any]]: ...
