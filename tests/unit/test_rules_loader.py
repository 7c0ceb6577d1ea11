from pathlib import Path

import pytest

from src.app_shell.config import ConfigError, validate_ops_rules
from src.rules.loader import load_rules, parse_rules

MINIMAL = """
project: {slug: test, rules_version: "1"}
auth: {}
rbac: {roles: {user: ["reports:view"]}}
uploads: {max_upload_bytes: 100, allowlist_extensions: [".csv"]}
validation:
  campaign_archetypes: ["Innovation"]
  tv_subtypes: ["open tv"]
  r1_required_keywords: []
  r3_required_subtypes: []
  pm_type_compatibility: []
  reach_level_values: ["Low"]
"""


def test_project_rules_file_loads(rules):
    assert rules.project.slug == "media-governance"
    assert rules.auth.demo.enabled is True
    assert "Nivea" in rules.validation.share_of_voice_categories
    assert rules.uploads.game_plan_sheet == "NIVEA Game Plan Table"


def test_plain_yaml_uses_defaults():
    rules = parse_rules(MINIMAL)

    assert rules.auth.password_min_length == 8
    assert rules.validation.default_media_types == ["Digital", "Traditional"]
    assert rules.ops.required_env == []


def test_fenced_yaml_block():
    rules = parse_rules(f"# Notes\n\n```yaml\n{MINIMAL}\n```\ntrailing text")
    assert rules.project.slug == "test"


def test_schema_violation():
    with pytest.raises(ValueError, match="Rules validation failed"):
        parse_rules("project: {slug: test}\n")


def test_yaml_syntax_error():
    with pytest.raises(ValueError, match="Invalid YAML syntax"):
        parse_rules("project: [unclosed\n")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "rules.yaml")


def test_ops_requires_env(monkeypatch, tmp_path):
    rules = parse_rules(MINIMAL.replace("auth: {}", "auth: {}\nops: {required_env: [MG_TEST_SECRET]}"))
    monkeypatch.delenv("MG_TEST_SECRET", raising=False)

    with pytest.raises(ConfigError, match="MG_TEST_SECRET"):
        validate_ops_rules(rules, tmp_path)

    monkeypatch.setenv("MG_TEST_SECRET", "x")
    validate_ops_rules(rules, tmp_path / "data")
    assert Path(tmp_path / "data").is_dir()
