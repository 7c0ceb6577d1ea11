"""Unit tests for the game plan row validator."""

from typing import Any

import pytest

from src.components.validation import (
    ValidateInput,
    ValidationIssue,
    can_import,
    run_validate,
    validation_summary,
)
from src.components.validation._impl import _preview


@pytest.fixture
def master_data() -> dict[str, Any]:
    return {
        "categories": ["Face Care", "Deo"],
        "ranges": ["Cellular", "Luminous", "Black & White"],
        "campaigns": ["Cellular Epigenetics", "Luminous 630", "Invisible Fresh"],
        "countries": ["Germany", "France"],
        "subRegions": ["Western Europe"],
        "mediaTypes": ["Digital", "Traditional"],
        "mediaSubTypes": ["Meta", "YouTube", "Open TV"],
        "pmTypes": ["Non PM", "GR Only", "PM & FF"],
        "businessUnits": ["Nivea"],
        "categoryToRanges": {"Face Care": ["Cellular", "Luminous"], "Deo": ["Black & White"]},
        "rangeToCategories": {
            "Cellular": ["Face Care"],
            "Luminous": ["Face Care"],
            "Black & White": ["Deo"],
        },
        "rangeToCampaigns": {
            "Cellular": ["Cellular Epigenetics"],
            "Luminous": ["Luminous 630"],
            "Black & White": ["Invisible Fresh"],
        },
        "campaignToRangeMap": {
            "Cellular Epigenetics": "Cellular",
            "Luminous 630": "Luminous",
            "Invisible Fresh": "Black & White",
        },
        "countryToSubRegionMap": {"Germany": "Western Europe", "France": "Western Europe"},
        "subRegionToCountriesMap": {"Western Europe": ["Germany", "France"]},
        "mediaToSubtypes": {"Digital": ["Meta", "YouTube"], "Traditional": ["Open TV"]},
    }


def validate(records, master_data, rules, **kwargs):
    inp = ValidateInput(records=records, master_data=master_data, **kwargs)
    return run_validate(inp, rules.validation)


def messages(result, column=None):
    return [i.message for i in result.issues if column is None or i.column_name == column]


def test_valid_record_has_no_issues(game_plan_record, master_data, rules):
    result = validate([game_plan_record], master_data, rules, financial_cycle="ABP 2025")

    assert result.issues == []
    assert result.can_import is True
    assert result.summary.total == 0


def test_empty_record_is_ignored(game_plan_record, master_data, rules):
    empty = {key: "" for key in game_plan_record}
    result = validate([empty], master_data, rules)
    assert result.issues == []


def test_required_field_blank(game_plan_record, master_data, rules):
    game_plan_record["Playbook ID"] = "  "
    result = validate([game_plan_record], master_data, rules)

    assert "Playbook ID is required and cannot be empty" in messages(result, "Playbook ID")
    assert result.can_import is False


def test_missing_column_reported_once_on_first_row(game_plan_record, master_data, rules):
    del game_plan_record["Total WOFF"]
    second = dict(game_plan_record, Burst="2")
    result = validate([game_plan_record, second], master_data, rules)

    missing = [i for i in result.issues if i.message.startswith("Missing required column")]
    assert len(missing) == 1
    assert missing[0].row_index == 0
    assert missing[0].column_name == "Total WOFF"


def test_column_aliases_are_accepted(game_plan_record, master_data, rules):
    game_plan_record["Start Date"] = game_plan_record.pop("Initial Date")
    result = validate([game_plan_record], master_data, rules)
    assert not [m for m in messages(result) if "Initial Date" in m]


def test_unknown_category_is_critical(game_plan_record, master_data, rules):
    game_plan_record["Category"] = "Hair"
    result = validate([game_plan_record], master_data, rules)

    issue = next(i for i in result.issues if i.column_name == "Category")
    assert issue.severity == "critical"
    assert issue.message == "Category 'Hair' does not exist in master data"
    assert issue.current_value == "Hair"


def test_unknown_range_and_campaign_are_warnings(game_plan_record, master_data, rules):
    game_plan_record["Range"] = "Hyaluron"
    game_plan_record["Campaign"] = "Hyaluron Launch"
    result = validate([game_plan_record], master_data, rules)

    warnings = {i.column_name for i in result.issues if i.severity == "warning"}
    assert {"Range", "Campaign"} <= warnings
    assert result.can_import is True


def test_range_outside_category_is_critical(game_plan_record, master_data, rules):
    game_plan_record["Range"] = "Black & White"
    game_plan_record["Campaign"] = "Invisible Fresh"
    result = validate([game_plan_record], master_data, rules)

    range_issues = [i for i in result.issues if i.column_name == "Range"]
    assert any(
        i.severity == "critical" and "is not valid for Category 'Face Care'" in i.message
        for i in range_issues
    )


def test_auto_create_downgrades_relationship_errors(game_plan_record, master_data, rules):
    game_plan_record["Range"] = "Black & White"
    game_plan_record["Campaign"] = "Invisible Fresh"
    result = validate([game_plan_record], master_data, rules, auto_create=True)

    range_issues = [i for i in result.issues if i.column_name == "Range"]
    assert range_issues
    assert all(i.severity == "warning" for i in range_issues)


def test_campaign_linked_to_other_range_warns(game_plan_record, master_data, rules):
    game_plan_record["Campaign"] = "Luminous 630"
    result = validate([game_plan_record], master_data, rules)

    assert any(
        "exists but is linked to range 'Luminous'" in m for m in messages(result, "Campaign")
    )


def test_dates_must_match_financial_cycle(game_plan_record, master_data, rules):
    game_plan_record["Initial Date"] = "2024-12-30"
    result = validate([game_plan_record], master_data, rules, financial_cycle="ABP 2025")

    found = messages(result)
    assert "Initial Date must be in 2025 to match the selected financial cycle" in found
    assert (
        "Initial Date and End Date must be in the same year - campaigns cannot span multiple years"
        in found
    )


def test_end_before_start(game_plan_record, master_data, rules):
    game_plan_record["End Date"] = "2025-01-01"
    result = validate([game_plan_record], master_data, rules)
    assert "End Date must be after Initial Date" in messages(result, "End Date")


def test_invalid_date_text(game_plan_record, master_data, rules):
    game_plan_record["End Date"] = "soon"
    result = validate([game_plan_record], master_data, rules)
    assert "End Date must be a valid date" in messages(result, "End Date")


def test_budget_must_equal_monthly_sum(game_plan_record, master_data, rules):
    game_plan_record["Mar"] = "5000"
    result = validate([game_plan_record], master_data, rules)

    assert (
        "Total Budget (30,000.00) should equal the sum of monthly budgets Jan-Dec (25,000.00)"
        in messages(result, "Total Budget")
    )


def test_budget_without_months(game_plan_record, master_data, rules):
    for month in ("Jan", "Feb", "Mar"):
        game_plan_record[month] = ""
    result = validate([game_plan_record], master_data, rules)
    assert any("Budget must be distributed across months" in m for m in messages(result))


def test_budget_must_be_positive(game_plan_record, master_data, rules):
    game_plan_record["Total Budget"] = "-10"
    result = validate([game_plan_record], master_data, rules)
    assert "Total Budget must be a valid number greater than zero" in messages(result)


def test_woff_consistency(game_plan_record, master_data, rules):
    game_plan_record["Total WOFF"] = "5"
    result = validate([game_plan_record], master_data, rules)

    assert (
        "Total WOFF should equal Total Weeks minus Total WOA (expected 2, got 5)"
        in messages(result, "Total WOFF")
    )


def test_tv_requires_trps_and_reach(game_plan_record, master_data, rules):
    game_plan_record["Media"] = "Traditional"
    game_plan_record["Media Subtype"] = "Open TV"
    result = validate([game_plan_record], master_data, rules)

    columns = {i.column_name for i in result.issues if i.severity == "critical"}
    assert {"Total TRPs", "Total R1+ (%)", "Total R3+ (%)"} <= columns


def test_trps_rejected_for_digital(game_plan_record, master_data, rules):
    game_plan_record["Total TRPs"] = "120"
    result = validate([game_plan_record], master_data, rules)

    assert any("should only be used for TV campaigns" in m for m in messages(result, "Total TRPs"))


def test_percentage_out_of_range(game_plan_record, master_data, rules):
    game_plan_record["Total R1+ (%)"] = "140%"
    result = validate([game_plan_record], master_data, rules)

    assert any("must be a valid percentage (0-100%)" in m for m in messages(result))


def test_media_subtype_must_belong_to_media(game_plan_record, master_data, rules):
    game_plan_record["Media Subtype"] = "Open TV"
    result = validate([game_plan_record], master_data, rules)

    assert any(
        "Media Subtype 'Open TV' is not valid for Media 'Digital'" in m
        for m in messages(result, "Media Subtype")
    )


def test_pm_type_compatibility(game_plan_record, master_data, rules):
    game_plan_record["Media"] = "Traditional"
    game_plan_record["Media Subtype"] = "Open TV"
    game_plan_record["PM Type"] = "PM & FF"
    result = validate([game_plan_record], master_data, rules)

    assert any(
        m.startswith("PM Type 'PM & FF' is not valid for Media Subtype 'Open TV'")
        for m in messages(result, "PM Type")
    )


def test_country_must_match_selected(game_plan_record, master_data, rules):
    master_data["selectedCountry"] = "France"
    game_plan_record["Country"] = "Germany"
    result = validate([game_plan_record], master_data, rules)

    assert (
        "Country 'Germany' does not match the selected country 'France' for this upload"
        in messages(result, "Country")
    )


def test_sub_region_must_belong_to_country(game_plan_record, master_data, rules):
    master_data["subRegions"].append("Middle East")
    game_plan_record["Sub Region"] = "Middle East"
    result = validate([game_plan_record], master_data, rules)

    assert any("does not belong to country 'Germany'" in m for m in messages(result, "Sub Region"))


def test_duplicate_rows_flagged_on_each_copy(game_plan_record, master_data, rules):
    result = validate([game_plan_record, dict(game_plan_record)], master_data, rules)

    duplicates = [i for i in result.issues if i.message.startswith("Duplicate campaign found")]
    assert [i.row_index for i in duplicates] == [0, 1]


def test_burst_and_archetype(game_plan_record, master_data, rules):
    game_plan_record["Burst"] = "1.5"
    game_plan_record["Campaign Archetype"] = "Launch"
    result = validate([game_plan_record], master_data, rules)

    assert any(m.startswith("Burst must be a positive integer") for m in messages(result, "Burst"))
    assert any(
        m.startswith("Campaign Archetype 'Launch' must be one of")
        for m in messages(result, "Campaign Archetype")
    )


def test_row_offset_shifts_indices(game_plan_record, master_data, rules):
    game_plan_record["Playbook ID"] = ""
    result = validate([game_plan_record], master_data, rules, row_offset=50)
    assert {i.row_index for i in result.issues} == {50}


def test_summary_and_can_import():
    issues = [
        ValidationIssue(0, "Range", "warning", "w"),
        ValidationIssue(0, "Category", "critical", "c"),
        ValidationIssue(2, "Range", "suggestion", "s"),
    ]
    summary = validation_summary(issues)

    assert summary.total == 3
    assert summary.critical == 1
    assert summary.warning == 1
    assert summary.suggestion == 1
    assert summary.by_field == {"Range": 2, "Category": 1}
    assert summary.unique_rows == 2
    assert can_import(issues) is False
    assert can_import(issues[:1]) is True


def test_issue_dict_round_trip():
    issue = ValidationIssue(3, "Burst", "critical", "bad", "0")
    assert ValidationIssue.from_dict(issue.to_dict()) == issue


@pytest.mark.parametrize(
    "year,ok",
    [("2000", True), ("2100", True), ("2101", False), ("1999", False), ("25", False), ("2025.5", False)],
)
def test_year_bounds(game_plan_record, master_data, rules, year, ok):
    game_plan_record["Year"] = year
    game_plan_record["Initial Date"] = ""
    game_plan_record["End Date"] = ""
    result = validate([game_plan_record], master_data, rules)

    year_issues = [i for i in result.issues if i.column_name == "Year"]
    if ok:
        assert year_issues == []
    else:
        assert [(i.severity, i.message) for i in year_issues] == [
            (
                "critical",
                f"Year must be a valid 4-digit year between 2000-2100. Current value: '{year}'",
            )
        ]


def test_year_must_match_dates(game_plan_record, master_data, rules):
    game_plan_record["Year"] = "2025"
    assert messages(validate([game_plan_record], master_data, rules), "Year") == []

    game_plan_record["Year"] = "2024"
    result = validate([game_plan_record], master_data, rules)

    issue = next(i for i in result.issues if i.column_name == "Year")
    assert issue.severity == "critical"
    assert issue.message == "Year field must match the year in Initial Date and End Date"


def test_blank_year_without_dates_warns(game_plan_record, master_data, rules):
    game_plan_record["Year"] = ""
    assert messages(validate([game_plan_record], master_data, rules), "Year") == []

    game_plan_record["Initial Date"] = ""
    game_plan_record["End Date"] = ""
    result = validate([game_plan_record], master_data, rules)

    year_issues = [i for i in result.issues if i.column_name == "Year"]
    assert [(i.severity, i.message) for i in year_issues] == [
        ("warning", "Year field is required when no Initial Date or End Date is provided")
    ]


def test_campaign_from_other_category_is_critical(game_plan_record, master_data, rules):
    game_plan_record["Campaign"] = "Invisible Fresh"
    result = validate([game_plan_record], master_data, rules)

    issue = next(
        i for i in result.issues if i.column_name == "Campaign" and "belongs to Range" in i.message
    )
    assert issue.severity == "critical"
    assert issue.message == (
        "Campaign 'Invisible Fresh' belongs to Range 'Black & White', "
        "which is not linked to Category 'Face Care'"
    )
    assert result.can_import is False


def test_campaign_category_ignores_unmapped_campaign(game_plan_record, master_data, rules):
    del master_data["campaignToRangeMap"]["Invisible Fresh"]
    game_plan_record["Campaign"] = "Invisible Fresh"
    result = validate([game_plan_record], master_data, rules)
    assert not any("belongs to Range" in m for m in messages(result, "Campaign"))


def test_single_month_holding_whole_budget(game_plan_record, master_data, rules):
    game_plan_record["Jan"] = "30000"
    game_plan_record["Feb"] = ""
    game_plan_record["Mar"] = "0"
    result = validate([game_plan_record], master_data, rules)

    assert messages(result, "Total Budget") == []


def test_valid_ranges_preview_is_capped(game_plan_record, master_data, rules):
    extra = ["Hyaluron", "Q10", "Derma", "Sun"]
    master_data["ranges"] += extra
    master_data["categoryToRanges"]["Face Care"] += extra
    game_plan_record["Range"] = "Black & White"
    game_plan_record["Campaign"] = "Invisible Fresh"
    result = validate([game_plan_record], master_data, rules)

    assert (
        "Range 'Black & White' is not valid for Category 'Face Care'. "
        "Valid ranges: Cellular, Luminous, Hyaluron, Q10, Derma..."
    ) in messages(result, "Range")


def test_preview_limits():
    assert _preview(["a", "b", "c"]) == "a, b, c"
    assert _preview(["a", "b", "c", "d", "e"]) == "a, b, c, d, e"
    assert _preview(["a", "b", "c", "d", "e", "f"]) == "a, b, c, d, e..."
