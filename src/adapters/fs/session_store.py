"""
File-backed upload session store.

Each staged upload is a JSON document at ``<sessions_dir>/<id>.json``.
Sessions expire after a fixed timeout; reading a session slides the expiry
forward so an admin working through a long review does not lose it.

Reads and writes of one session go through a per-file lock shared by every
store instance, since request handlers and background imports each build
their own store.
"""

import json
import logging
import os
import re
import secrets
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from threading import Lock, RLock
from typing import Any

from pydantic import ValidationError

from src.domain.entities import SessionKind, UploadSession, utc_now

logger = logging.getLogger(__name__)

SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

_locks: dict[str, RLock] = {}
_locks_guard = Lock()


def _lock_for(path: Path) -> RLock:
    with _locks_guard:
        return _locks.setdefault(str(path), RLock())


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def is_valid_session_id(session_id: str | None) -> bool:
    return bool(session_id) and bool(SESSION_ID_RE.match(session_id or ""))


def new_session_id(kind: SessionKind) -> str:
    prefix = {"media_sufficiency": "ms", "share_of_voice": "sov", "reach_planning": "rp"}[kind]
    return f"{prefix}_{int(utc_now().timestamp() * 1000)}_{secrets.token_hex(4)}"


class FileSessionStore:
    def __init__(self, sessions_dir: str, timeout_hours: float = 6.0):
        self.sessions_dir = Path(sessions_dir).resolve()
        self.timeout = timedelta(hours=timeout_hours)
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        if not is_valid_session_id(session_id):
            raise ValueError(f"Invalid session id: {session_id!r}")
        target = (self.sessions_dir / f"{session_id}.json").resolve()
        if target.parent != self.sessions_dir:
            raise ValueError(f"Path traversal attempt detected: {session_id}")
        return target

    def _write(self, session: UploadSession) -> None:
        """Write to a fresh temp file, then atomically replace the session file."""
        path = self._path(session.id)
        with _lock_for(path):
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.sessions_dir,
                prefix=f"{session.id}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                f.write(session.model_dump_json(indent=2))
                tmp_path = f.name
            try:
                os.replace(tmp_path, path)
            except OSError:
                Path(tmp_path).unlink(missing_ok=True)
                raise

    def _read(self, path: Path) -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
        return data

    def create_session(
        self,
        kind: SessionKind,
        original_filename: str,
        file_size: int,
        records: list[dict[str, Any]],
        **fields: Any,
    ) -> UploadSession:
        """Persist a freshly uploaded file's records as a new session."""
        now = utc_now()
        data = dict(fields.pop("data", {}) or {})
        data["records"] = records
        session = UploadSession(
            id=new_session_id(kind),
            kind=kind,
            original_filename=original_filename,
            file_size=file_size,
            record_count=len(records),
            created_at=now,
            expires_at=now + self.timeout,
            last_accessed_at=now,
            data=data,
            **fields,
        )
        self._write(session)
        logger.info(
            "Created %s session %s (%d records)", kind, session.id, session.record_count
        )
        return session

    def get_valid_session(self, session_id: str) -> UploadSession | None:
        """
        Load a session if it exists and has not expired.

        Legacy files without ``expires_at`` are given one from their creation
        time. Expired sessions are deleted. Access extends the expiry; the
        read and the expiry write happen under the session lock so a
        concurrent save is never overwritten with stale content.
        """
        try:
            path = self._path(session_id)
        except ValueError:
            return None

        with _lock_for(path):
            if not path.exists():
                return None
            try:
                raw = self._read(path)
            except (OSError, json.JSONDecodeError) as e:
                logger.error("Unreadable session file %s: %s", path.name, e)
                return None

            now = utc_now()
            if not raw.get("expires_at"):
                created = raw.get("created_at") or now.isoformat()
                raw["expires_at"] = (
                    _aware(datetime.fromisoformat(created)) + self.timeout
                ).isoformat()
                logger.info("Migrated legacy session %s", session_id)

            try:
                session = UploadSession.model_validate(raw)
            except ValidationError as e:
                logger.error("Invalid session document %s: %s", path.name, e)
                return None

            if session.expires_at is not None and _aware(session.expires_at) <= now:
                logger.info("Session %s expired; deleting", session_id)
                path.unlink(missing_ok=True)
                return None

            session.last_accessed_at = now
            session.expires_at = now + self.timeout
            self._write(session)
            return session

    def save_session(self, session: UploadSession) -> UploadSession:
        """
        Persist ``session``.

        A later expiry written by a concurrent read is kept, so a long-running
        writer holding an old copy does not shorten the session's life.
        """
        session.record_count = len(session.data.get("records", []))
        path = self._path(session.id)
        with _lock_for(path):
            if path.exists():
                try:
                    expires_at, _legacy = self._expiry_of(self._read(path))
                except (OSError, ValueError):
                    expires_at = None
                if expires_at is not None and (
                    session.expires_at is None or expires_at > _aware(session.expires_at)
                ):
                    session.expires_at = expires_at
            self._write(session)
        return session

    def delete_session(self, session_id: str) -> bool:
        try:
            path = self._path(session_id)
        except ValueError:
            return False
        with _lock_for(path):
            if path.exists():
                path.unlink()
                return True
        return False

    def _session_files(self) -> list[Path]:
        return sorted(p for p in self.sessions_dir.glob("*.json") if "backup" not in p.name)

    def _expiry_of(self, raw: dict[str, Any]) -> tuple[datetime | None, bool]:
        """Return (expires_at, is_legacy) for a raw session document."""
        if raw.get("expires_at"):
            return _aware(datetime.fromisoformat(raw["expires_at"])), False
        if raw.get("created_at"):
            return _aware(datetime.fromisoformat(raw["created_at"])) + self.timeout, True
        return None, True

    def cleanup_expired_sessions(self) -> dict[str, int]:
        """Delete expired session files. Files named ``*backup*`` are never touched."""
        removed = 0
        errors = 0
        now = utc_now()
        for path in self._session_files():
            try:
                with _lock_for(path):
                    expires_at, _legacy = self._expiry_of(self._read(path))
                    if expires_at is None or expires_at <= now:
                        path.unlink()
                        removed += 1
                        logger.info("Removed expired session %s", path.stem)
            except (OSError, ValueError) as e:
                errors += 1
                logger.error("Failed to clean up session %s: %s", path.name, e)
        return {"removed": removed, "errors": errors}

    def session_stats(self) -> dict[str, int]:
        stats = {"total": 0, "active": 0, "expired": 0, "legacy": 0}
        now = utc_now()
        for path in self._session_files():
            stats["total"] += 1
            try:
                expires_at, legacy = self._expiry_of(self._read(path))
            except (OSError, ValueError):
                stats["expired"] += 1
                continue
            if legacy:
                stats["legacy"] += 1
            if expires_at is not None and expires_at > now:
                stats["active"] += 1
            else:
                stats["expired"] += 1
        return stats
