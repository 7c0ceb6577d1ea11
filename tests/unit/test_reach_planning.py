from typing import Any

import pytest

from src.components.reach_planning import (
    ReachImportInput,
    ReachValidateInput,
    is_valid_percentage,
    run_import_reach,
    run_validate_reach,
    transform_record,
)
from src.domain.entities import Country, LastUpdate

LEVELS = ["Sufficient", "Moderate", "Low", "Insufficient"]


@pytest.fixture
def reach_row() -> dict[str, Any]:
    return {
        "Last Update": "ABP 2025",
        "Sub Region": "Western Europe",
        "Country": "Germany",
        "BU": "Nivea",
        "Category": "Face Care",
        "Range": "Cellular",
        "Campaign": "Cellular Epigenetics",
        "Total TRPs": "350",
        "TV R1+ (Total)": "62%",
        "Digital R1+ (Total)": "0.41",
        "Planned Combined Reach": "0.7",
        "Combined IDEAL Reach": "85%",
        "TV Reach Level Check": "Sufficient",
        "WOA Open TV": "6",
    }


class Lookup:
    def __init__(self, items):
        self.items = {item.name: item for item in items}

    def get_by_name(self, name):
        return self.items.get(name)


class CollectingRepo:
    def __init__(self, fail_on=None):
        self.rows = []
        self.fail_on = fail_on

    def save(self, row):
        if row.campaign == self.fail_on:
            raise ValueError("constraint failed")
        row.id = len(self.rows) + 1
        self.rows.append(row)
        return row


@pytest.mark.parametrize(
    "value,ok",
    [("45%", True), ("100%", True), ("0.45", True), ("1", True), ("45", False), ("120%", False), ("abc", False)],
)
def test_is_valid_percentage(value, ok):
    assert is_valid_percentage(value) is ok


def test_valid_row(reach_row):
    out = run_validate_reach(ReachValidateInput([reach_row]), LEVELS)
    assert out.issues == []
    assert out.can_import is True


def test_required_and_number_checks(reach_row):
    reach_row["Campaign"] = ""
    reach_row["Total TRPs"] = "lots"
    out = run_validate_reach(ReachValidateInput([reach_row]), LEVELS)

    found = {(i.column_name, i.message) for i in out.issues}
    assert ("Campaign", "Campaign is required") in found
    assert ("Total TRPs", "Total TRPs must be a valid number") in found
    assert out.can_import is False


def test_bad_percentage_and_level(reach_row):
    reach_row["TV R1+ (Total)"] = "62"
    reach_row["TV Reach Level Check"] = "Great"
    out = run_validate_reach(ReachValidateInput([reach_row]), LEVELS)

    by_column = {i.column_name: i for i in out.issues}
    assert by_column["TV R1+ (Total)"].severity == "critical"
    assert by_column["TV Reach Level Check"].severity == "warning"


def test_master_data_mismatches_are_warnings(reach_row):
    master_data = {
        "countries": ["Germany"],
        "campaigns": ["Luminous 630"],
        "countryToSubRegionMap": {"Germany": "Central Europe"},
    }
    out = run_validate_reach(ReachValidateInput([reach_row], master_data), LEVELS)

    messages = [i.message for i in out.issues]
    assert 'Campaign "Cellular Epigenetics" does not exist in master data' in messages
    assert any(m.startswith('Sub Region "Western Europe" may not match Country "Germany"') for m in messages)
    assert all(i.severity == "warning" for i in out.issues)
    assert out.can_import is True


def test_transform_record_scales_reach(reach_row):
    row = transform_record(reach_row)

    assert row["tv_planned_r1_plus"] == 0.62
    assert row["digital_planned_r1_plus"] == 0.41
    assert row["combined_potential_reach"] == 0.85
    assert row["total_trps"] == 350.0
    assert row["bu"] == "Nivea"
    assert row["tv_copy_length"] is None


def test_transform_record_small_percentages(reach_row):
    reach_row["TV R1+ (Total)"] = "1%"
    reach_row["Digital R1+ (Total)"] = "0.5%"
    reach_row["Planned Combined Reach"] = "45%"
    reach_row["Combined IDEAL Reach"] = "150%"

    row = transform_record(reach_row)

    assert row["tv_planned_r1_plus"] == pytest.approx(0.01)
    assert row["digital_planned_r1_plus"] == pytest.approx(0.005)
    assert row["planned_combined_reach"] == pytest.approx(0.45)
    assert row["combined_potential_reach"] == 1.0


def test_import_resolves_ids(reach_row):
    repo = CollectingRepo()
    out = run_import_reach(
        ReachImportInput([reach_row], "rp_1", "ops@example.com"),
        repo,
        Lookup([LastUpdate(id=7, name="ABP 2025")]),
        Lookup([Country(id=4, name="Germany")]),
    )

    assert out.success is True
    assert out.imported == 1
    saved = repo.rows[0]
    assert saved.last_update_id == 7
    assert saved.country_id == 4
    assert saved.uploaded_by == "ops@example.com"
    assert saved.upload_session == "rp_1"


def test_import_counts_failed_rows(reach_row):
    other = dict(reach_row, Campaign="Broken")
    out = run_import_reach(
        ReachImportInput([reach_row, other], "rp_1"),
        CollectingRepo(fail_on="Broken"),
        Lookup([]),
        Lookup([]),
    )

    assert out.total == 2
    assert out.imported == 1
    assert out.failed == 1
    assert out.row_errors == ["Row 2: constraint failed"]


def test_import_without_records():
    out = run_import_reach(ReachImportInput([], "rp_1"), CollectingRepo(), Lookup([]), Lookup([]))
    assert out.success is False
    assert out.error == "No records to import"
