"""
Share of voice component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import ShareOfVoice


class ShareOfVoiceRepoPort(Protocol):
    def replace_for(self, country_id: int, business_unit_id: int, rows: list[ShareOfVoice]) -> int:
        """Replace every row for the country/business unit pair; returns rows written."""
        ...
