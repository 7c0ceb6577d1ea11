"""
Compliance rule CRUD. Rules are the checklist items scores are recorded against.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.sqlite.governance_repos import SQLiteComplianceRuleRepo
from src.api.deps import get_compliance_rule_repo, require_permission
from src.api.schemas import ComplianceRuleRequest, serialize
from src.components.governance import normalise_platform
from src.domain.entities import ComplianceRule, User

router = APIRouter()


def _get_or_404(rule_id: int, repo: SQLiteComplianceRuleRepo) -> ComplianceRule:
    rule = repo.get_by_id(rule_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="Rule not found")
    return rule


@router.get("")
def list_rules(
    platform: str | None = None,
    status: str | None = None,
    current_user: User = Depends(require_permission("governance:view")),
    repo: SQLiteComplianceRuleRepo = Depends(get_compliance_rule_repo),
) -> dict[str, Any]:
    return {"rules": [serialize(r) for r in repo.list_all(normalise_platform(platform), status)]}


@router.get("/{rule_id}")
def get_rule(
    rule_id: int,
    current_user: User = Depends(require_permission("governance:view")),
    repo: SQLiteComplianceRuleRepo = Depends(get_compliance_rule_repo),
) -> dict[str, Any]:
    return {"rule": serialize(_get_or_404(rule_id, repo))}


@router.post("", status_code=201)
def create_rule(
    req: ComplianceRuleRequest,
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteComplianceRuleRepo = Depends(get_compliance_rule_repo),
) -> dict[str, Any]:
    if not req.platform or not req.title:
        raise HTTPException(status_code=400, detail="Platform and title are required")
    fields = req.model_dump(exclude_none=True)
    fields["platform"] = normalise_platform(req.platform)
    return {"rule": serialize(repo.save(ComplianceRule(**fields)))}


@router.put("/{rule_id}")
def update_rule(
    rule_id: int,
    req: ComplianceRuleRequest,
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteComplianceRuleRepo = Depends(get_compliance_rule_repo),
) -> dict[str, Any]:
    """Partial update: only the fields present in the body change."""
    rule = _get_or_404(rule_id, repo)
    for field, value in req.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(rule, field, normalise_platform(value) if field == "platform" else value)
    return {"rule": serialize(repo.save(rule))}


@router.delete("/{rule_id}")
def delete_rule(
    rule_id: int,
    current_user: User = Depends(require_permission("governance:edit")),
    repo: SQLiteComplianceRuleRepo = Depends(get_compliance_rule_repo),
) -> dict[str, Any]:
    _get_or_404(rule_id, repo)
    repo.delete(rule_id)
    return {"success": True, "message": "Rule deleted successfully"}
