from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import Settings, get_rules, get_settings
from src.api.main import app
from src.app_shell.seed import seed_demo
from src.rules.loader import load_rules
from src.rules.models import Rules


@pytest.fixture
def rules() -> Rules:
    # Tests run from the project root
    return load_rules(Path("rules.yaml").resolve())


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Settings]:
    """Settings pointing at a migrated database under ``tmp_path``."""
    monkeypatch.setenv("MG_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    get_rules.cache_clear()
    s = get_settings()
    SQLiteMigrator(s.db_path, s.migrations_dir).run_migrations()
    yield s
    get_settings.cache_clear()
    get_rules.cache_clear()


@pytest.fixture
def db_path(settings: Settings) -> str:
    return settings.db_path


@pytest.fixture
def seeded_db(db_path: str) -> str:
    seed_demo(db_path)
    return db_path


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def game_plan_record() -> dict[str, Any]:
    """A row that passes validation against the seeded master data."""
    return {
        "Category": "Face Care",
        "Range": "Cellular",
        "Campaign": "Cellular Epigenetics",
        "Playbook ID": "PB-001",
        "Campaign Archetype": "Innovation",
        "Burst": "1",
        "Media": "Digital",
        "Media Subtype": "Meta",
        "Initial Date": "2025-01-06",
        "End Date": "2025-03-30",
        "Total Weeks": "12",
        "Total Budget": "30000",
        "Jan": "10000",
        "Feb": "10000",
        "Mar": "10000",
        "Apr": "",
        "May": "",
        "Jun": "",
        "Jul": "",
        "Aug": "",
        "Sep": "",
        "Oct": "",
        "Nov": "",
        "Dec": "",
        "Total WOA": "10",
        "Total WOFF": "2",
        "Total TRPs": "",
        "Total R1+ (%)": "",
        "Total R3+ (%)": "",
        "Country": "Germany",
        "Sub Region": "Western Europe",
        "Business Unit": "Nivea",
        "PM Type": "Non PM",
    }
