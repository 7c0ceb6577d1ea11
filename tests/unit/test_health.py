import sqlite3

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.shell.http.health import (
    CheckResult,
    DatabaseCheck,
    HealthCheckRegistry,
    HealthStatus,
    StartupCheck,
    StartupTracker,
    create_health_router,
)


class StaticCheck:
    def __init__(self, name, status):
        self.name = name
        self.status = status

    def check(self):
        return CheckResult(name=self.name, status=self.status, message=self.status.value)


@pytest.fixture(autouse=True)
def reset_tracker():
    StartupTracker.reset()
    yield
    StartupTracker.reset()


def make_client(*checks):
    registry = HealthCheckRegistry()
    for check in checks:
        registry.register(check)
    app = FastAPI()
    app.include_router(create_health_router(registry, "9.9.9"))
    return TestClient(app)


def test_startup_check_follows_tracker():
    check = StartupCheck()
    assert check.check().status == HealthStatus.UNHEALTHY

    StartupTracker.mark_started()
    result = check.check()
    assert result.status == HealthStatus.HEALTHY
    assert result.details["uptime_seconds"] >= 0


def test_database_check(tmp_path):
    missing = DatabaseCheck(str(tmp_path / "nope.db")).check()
    assert missing.status == HealthStatus.UNHEALTHY
    assert missing.message.startswith("Database file not found")

    path = tmp_path / "app.db"
    sqlite3.connect(path).close()
    assert DatabaseCheck(lambda: str(path)).check().status == HealthStatus.HEALTHY


def test_health_all_healthy():
    client = make_client(StaticCheck("a", HealthStatus.HEALTHY))
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["version"] == "9.9.9"
    assert body["checks"][0]["name"] == "a"


def test_health_degraded_is_503():
    client = make_client(
        StaticCheck("a", HealthStatus.HEALTHY), StaticCheck("b", HealthStatus.DEGRADED)
    )
    resp = client.get("/health")

    assert resp.status_code == 503
    assert resp.json()["status"] == "degraded"


def test_ready_and_live():
    client = make_client(StartupCheck())
    assert client.get("/health/ready").status_code == 503

    StartupTracker.mark_started()
    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["ready"] is True
    assert client.get("/health/live").json()["alive"] is True
