import sqlite3

import pytest

from src.components.share_of_voice import (
    SovGridRow,
    SovSaveInput,
    SovValidateInput,
    group_by_category,
    is_valid_company_format,
    rows_from_records,
    run_save_sov,
    run_validate_sov,
)

CATEGORIES = ["Face Care", "Deo"]


class ReplacingRepo:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def replace_for(self, country_id, business_unit_id, rows):
        if self.error:
            raise self.error
        self.calls.append((country_id, business_unit_id, rows))
        return len(rows)


def tv_row(category, company, investment="1000", trps="50"):
    return {
        "Category": category,
        "Company": company,
        "Total TV Investment": investment,
        "Total TV TRPs": trps,
    }


def validate(records, media_type="tv"):
    return run_validate_sov(SovValidateInput(records, "Nivea", CATEGORIES, media_type))


@pytest.mark.parametrize(
    "company,ok",
    [("Nivea", True), ("derma", True), ("Competitor 3", True), ("Competitor6", False), ("L'Oreal", False)],
)
def test_company_format(company, ok):
    assert is_valid_company_format(company) is ok


def test_valid_upload():
    out = validate([tv_row("Face Care", "Nivea"), tv_row("Face Care", "Competitor 1")])
    assert out.issues == []
    assert out.can_import is True


def test_category_must_belong_to_business_unit():
    out = validate([tv_row("Sun", "Nivea")])

    issue = out.issues[0]
    assert issue.severity == "critical"
    assert issue.message == (
        "Category must be valid for Nivea business unit. Valid categories: Face Care, Deo"
    )


def test_unusual_company_is_only_a_suggestion():
    out = validate([tv_row("Face Care", "Nivea"), tv_row("Face Care", "L'Oreal")])

    assert [i.severity for i in out.issues] == ["suggestion"]
    assert out.can_import is True


def test_missing_and_bad_numbers():
    out = validate([tv_row("Face Care", "Nivea", investment="", trps="n/a")])

    by_column = {i.column_name: i.severity for i in out.issues}
    assert by_column == {"Total TV Investment": "critical", "Total TV TRPs": "warning"}


def test_digital_checks_digital_columns():
    record = {
        "Category": "Deo",
        "Company": "Nivea",
        "Total Digital Spend": "500",
        "Total Digital Impressions": "",
    }
    out = validate([record], media_type="digital")
    assert [i.column_name for i in out.issues] == ["Total Digital Impressions"]


def test_duplicate_pairs_reference_other_rows():
    out = validate([tv_row("Face Care", "Nivea"), tv_row("face care", "NIVEA")])

    duplicates = [i for i in out.issues if i.message.startswith("Duplicate combination")]
    assert len(duplicates) == 2
    assert duplicates[0].message.endswith("Found duplicates at rows: 2")
    assert duplicates[1].message.endswith("Found duplicates at rows: 1")


def test_each_category_needs_own_brand():
    out = validate([tv_row("Deo", "Competitor 1")])

    assert any(
        i.message == "Each category must have a Nivea entry. Missing Nivea entry for this category."
        for i in out.issues
    )


def test_rows_from_records():
    rows = rows_from_records([tv_row(" Deo ", "Nivea", "1,200", "")])
    assert rows == [SovGridRow(category="Deo", company="Nivea", total_tv_investment=1200.0)]


def test_group_by_category_drops_repeated_companies():
    groups, dropped = group_by_category(
        [
            SovGridRow("Face Care", "Nivea"),
            SovGridRow("Deo", "Nivea"),
            SovGridRow("Face Care", "Competitor 1"),
            SovGridRow("Face Care", "Nivea"),
        ]
    )

    assert list(groups) == ["Face Care", "Deo"]
    assert [r.company for r in groups["Face Care"]] == ["Nivea", "Competitor 1"]
    assert dropped == 1


def test_save_tv_clears_digital_fields():
    repo = ReplacingRepo()
    rows = [
        SovGridRow("Face Care", "Nivea", 100.0, 5.0, 9.0, 9.0),
        SovGridRow("Face Care", "Competitor 1", 80.0, 4.0),
    ]
    out = run_save_sov(SovSaveInput(4, 1, "tv", rows, uploaded_by="ops"), repo)

    assert out.success is True
    assert out.saved == 2
    _, _, saved = repo.calls[0]
    assert [r.position for r in saved] == [0, 1]
    assert saved[0].total_tv_investment == 100.0
    assert saved[0].total_digital_spend is None
    assert saved[0].upload_session.startswith("grid-")


def test_save_requires_category_and_company():
    out = run_save_sov(SovSaveInput(4, 1, "tv", [SovGridRow("Face Care", " ")]), ReplacingRepo())
    assert out.success is False
    assert out.errors == ["Row 1: category and company are required"]


def test_save_rejects_media_type():
    out = run_save_sov(SovSaveInput(4, 1, "radio", []), ReplacingRepo())
    assert out.errors == ["Invalid media type"]


def test_save_reports_database_errors():
    repo = ReplacingRepo(error=sqlite3.OperationalError("database is locked"))
    out = run_save_sov(SovSaveInput(4, 1, "digital", [SovGridRow("Deo", "Nivea")]), repo)

    assert out.success is False
    assert out.errors == ["database is locked"]
