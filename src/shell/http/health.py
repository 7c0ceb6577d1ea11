"""
Health endpoints.

- /health: overall status from every registered check
- /health/ready: readiness probe; 503 until all checks pass
- /health/live: liveness probe (process alive)
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

# --- Types ---


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)


class HealthCheck(Protocol):
    name: str

    def check(self) -> CheckResult: ...


# --- Startup Tracker ---


class StartupTracker:
    """Tracks application startup time for uptime calculation."""

    _start_time: float | None = None

    @classmethod
    def mark_started(cls) -> None:
        cls._start_time = time.time()

    @classmethod
    def get_uptime_seconds(cls) -> float:
        if cls._start_time is None:
            return 0.0
        return time.time() - cls._start_time

    @classmethod
    def is_started(cls) -> bool:
        return cls._start_time is not None

    @classmethod
    def reset(cls) -> None:
        cls._start_time = None


# --- Registry ---


class HealthCheckRegistry:
    """Registry of health checks to run."""

    def __init__(self) -> None:
        self._checks: list[HealthCheck] = []

    def register(self, check: HealthCheck) -> None:
        self._checks.append(check)

    def run_all(self) -> list[CheckResult]:
        return [check.check() for check in self._checks]

    def clear(self) -> None:
        self._checks = []


# --- Built-in Checks ---


class StartupCheck:
    """Healthy once the lifespan handler has finished startup."""

    name = "startup"

    def check(self) -> CheckResult:
        if StartupTracker.is_started():
            return CheckResult(
                name=self.name,
                status=HealthStatus.HEALTHY,
                message="Startup complete",
                details={"uptime_seconds": StartupTracker.get_uptime_seconds()},
            )
        return CheckResult(
            name=self.name,
            status=HealthStatus.UNHEALTHY,
            message="Startup not complete",
        )


class DatabaseCheck:
    """SQLite connectivity: the database file must exist and answer a query."""

    name = "database"

    def __init__(self, db_path: str | Callable[[], str]) -> None:
        self._db_path = db_path

    def _path(self) -> str:
        return self._db_path() if callable(self._db_path) else self._db_path

    def check(self) -> CheckResult:
        start = time.time()
        path = self._path()
        if not Path(path).exists():
            return CheckResult(
                name=self.name,
                status=HealthStatus.UNHEALTHY,
                message=f"Database file not found: {path}",
            )
        try:
            conn = sqlite3.connect(path)
            try:
                conn.execute("SELECT 1").fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            return CheckResult(
                name=self.name,
                status=HealthStatus.UNHEALTHY,
                message=f"Database error: {e!s}",
                latency_ms=(time.time() - start) * 1000,
            )
        return CheckResult(
            name=self.name,
            status=HealthStatus.HEALTHY,
            message="Database connected",
            latency_ms=(time.time() - start) * 1000,
        )


# --- FastAPI Router ---


def _overall(results: list[CheckResult]) -> HealthStatus:
    if all(r.status == HealthStatus.HEALTHY for r in results):
        return HealthStatus.HEALTHY
    if any(r.status == HealthStatus.UNHEALTHY for r in results):
        return HealthStatus.UNHEALTHY
    return HealthStatus.DEGRADED


def create_health_router(registry: HealthCheckRegistry, version: str = "0.0.0") -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get(
        "/health",
        response_model=None,
        responses={200: {"description": "Service is healthy"}, 503: {"description": "Unhealthy"}},
    )
    def health_check() -> JSONResponse:
        results = registry.run_all()
        overall = _overall(results)
        response = {
            "status": overall.value,
            "version": version,
            "uptime_seconds": StartupTracker.get_uptime_seconds(),
            "checks": [
                {
                    "name": r.name,
                    "status": r.status.value,
                    "message": r.message,
                    "latency_ms": r.latency_ms,
                }
                for r in results
            ],
        }
        code = status.HTTP_200_OK if overall == HealthStatus.HEALTHY else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=response, status_code=code)

    @router.get(
        "/health/ready",
        response_model=None,
        responses={200: {"description": "Ready"}, 503: {"description": "Not ready"}},
    )
    def readiness_check() -> JSONResponse:
        results = registry.run_all()
        is_ready = all(r.status == HealthStatus.HEALTHY for r in results)
        response = {
            "ready": is_ready,
            "checks": [
                {"name": r.name, "status": r.status.value, "message": r.message} for r in results
            ],
        }
        code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=response, status_code=code)

    @router.get("/health/live", response_model=None)
    def liveness_check() -> JSONResponse:
        return JSONResponse(
            content={"alive": True, "uptime_seconds": StartupTracker.get_uptime_seconds()},
            status_code=status.HTTP_200_OK,
        )

    return router
