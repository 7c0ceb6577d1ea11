"""
Reach planning component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import Country, LastUpdate, MediaSufficiency


class MediaSufficiencyRepoPort(Protocol):
    def save(self, row: MediaSufficiency) -> MediaSufficiency: ...


class LastUpdateLookupPort(Protocol):
    def get_by_name(self, name: str) -> LastUpdate | None: ...


class CountryLookupPort(Protocol):
    def get_by_name(self, name: str) -> Country | None: ...
