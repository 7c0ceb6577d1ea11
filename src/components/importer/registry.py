"""
Tracks entities created automatically during a single import.

Ranges and campaigns created in auto-create mode are recorded here so the
import result can list them and their notes can name the upload session.
"""

from __future__ import annotations

import logging

from src.core.services.values import normalise_key

logger = logging.getLogger(__name__)

AUTO_CREATED_BY = "import_auto"


class AutoCreateRegistry:
    def __init__(self, session_id: str | None = None):
        self.session_id = session_id
        self._ids: dict[str, dict[str, int]] = {}
        self._names: dict[str, list[str]] = {}

    def register(self, kind: str, name: str, entity_id: int) -> None:
        key = normalise_key(name)
        bucket = self._ids.setdefault(kind, {})
        if key in bucket:
            return
        bucket[key] = entity_id
        self._names.setdefault(kind, []).append(name)
        logger.info("Auto-created %s %r (id=%s)", kind, name, entity_id)

    def note(self, context: str) -> str:
        suffix = f" (session {self.session_id})" if self.session_id else ""
        return f"Auto-created during import{suffix}: {context}. Pending admin review."

    def summary(self) -> dict[str, list[str]]:
        return {kind: list(names) for kind, names in self._names.items()}
