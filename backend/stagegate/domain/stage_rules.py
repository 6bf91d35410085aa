"""Stage-specific business rules.

STAGE_RULES is a closed map from stage slug to the rule functions that run
when a project targets that stage. Every registered stage must have an
entry (possibly empty); ``validate_stage_rules`` is run at startup so an
unconfigured stage fails loudly instead of silently yielding no checks.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from stagegate.core.exceptions import StageRuleConfigurationError
from stagegate.domain.approvals import ApprovalStatus, latest_by_role
from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck
from stagegate.domain.project_data import is_present

TECHNICAL_DESCRIPTION_MIN_LENGTH = 50
DEPARTMENT_REVIEW_ROLES = ("engineering", "qa", "production")


@dataclass(frozen=True)
class StageRuleContext:
    """Everything a stage rule may look at."""

    project: object
    target_stage: object
    current_stage: object | None = None
    documents: Sequence = field(default_factory=tuple)
    approvals: Sequence = field(default_factory=tuple)

    def has_document(self, category: str) -> bool:
        return any(
            d.category == category and (getattr(d, "status", None) or "active") == "active" for d in self.documents
        )


StageRule = Callable[[StageRuleContext], PrerequisiteCheck]


def _check(check_id, name, description, *, passed, required=False, details=None) -> PrerequisiteCheck:
    return PrerequisiteCheck(
        id=check_id,
        category=CheckCategory.STAGE_SPECIFIC,
        name=name,
        description=description,
        required=required,
        status=CheckStatus.PASSED if passed else CheckStatus.FAILED,
        details=None if passed else details,
    )


def technical_readiness(ctx: StageRuleContext) -> PrerequisiteCheck:
    description = (getattr(ctx.project, "description", None) or "").strip()
    return _check(
        "technical_readiness",
        "Technical readiness",
        "Project is ready for technical review",
        passed=len(description) >= TECHNICAL_DESCRIPTION_MIN_LENGTH,
        details=f"A description of at least {TECHNICAL_DESCRIPTION_MIN_LENGTH} characters helps the review",
    )


def department_reviews(ctx: StageRuleContext) -> PrerequisiteCheck:
    latest = latest_by_role(ctx.approvals)
    outstanding = [
        role for role in DEPARTMENT_REVIEW_ROLES
        if role not in latest or latest[role].status != ApprovalStatus.APPROVED
    ]
    return _check(
        "department_reviews",
        "Department reviews",
        "Engineering, QA and production reviews are complete",
        passed=not outstanding,
        details=f"Outstanding reviews: {', '.join(outstanding)}",
    )


def supplier_quotes_available(ctx: StageRuleContext) -> PrerequisiteCheck:
    return _check(
        "supplier_quotes_available",
        "Supplier quotes",
        "Supplier quotes have been received",
        passed=ctx.has_document("supplier_quote"),
        details="At least one supplier quote should be on file",
    )


def quote_approval(ctx: StageRuleContext) -> PrerequisiteCheck:
    return _check(
        "quote_approval",
        "Quote approval",
        "Quote has been approved by the customer",
        passed=is_present(getattr(ctx.project, "estimated_value", None)),
        required=True,
        details="Project value must be set before order confirmation",
    )


def order_details(ctx: StageRuleContext) -> PrerequisiteCheck:
    return _check(
        "order_details",
        "Order details",
        "Order details are complete",
        passed=getattr(ctx.project, "due_date", None) is not None,
        details="Due date helps with procurement planning",
    )


def procurement_complete(ctx: StageRuleContext) -> PrerequisiteCheck:
    return _check(
        "procurement_complete",
        "Procurement complete",
        "Materials and resources are secured",
        passed=ctx.has_document("supplier_po"),
        details="Supplier purchase orders should be issued before production",
    )


def production_complete(ctx: StageRuleContext) -> PrerequisiteCheck:
    return _check(
        "production_complete",
        "Production complete",
        "Production is finished and quality approved",
        passed=ctx.has_document("quality_plan"),
        details="Quality control records should be on file before closing",
    )


STAGE_RULES: Mapping[str, tuple[StageRule, ...]] = MappingProxyType({
    "inquiry_received": (),
    "technical_review": (technical_readiness,),
    "supplier_rfq_sent": (department_reviews,),
    "quoted": (supplier_quotes_available,),
    "order_confirmed": (quote_approval,),
    "procurement_planning": (order_details,),
    "production": (procurement_complete,),
    "completed": (production_complete,),
})


def validate_stage_rules(slugs: Iterable[str], rules: Mapping[str, tuple] = STAGE_RULES) -> None:
    """Raise StageRuleConfigurationError if any slug has no rule entry."""
    missing = sorted({slug for slug in slugs if slug not in rules})
    if missing:
        raise StageRuleConfigurationError(missing)


def rules_for(slug: str, rules: Mapping[str, tuple] = STAGE_RULES) -> tuple[StageRule, ...]:
    if slug not in rules:
        raise StageRuleConfigurationError([slug])
    return rules[slug]


def evaluate_stage_rules(ctx: StageRuleContext, rules: Mapping[str, tuple] = STAGE_RULES) -> list[PrerequisiteCheck]:
    return [rule(ctx) for rule in rules_for(ctx.target_stage.slug, rules)]
