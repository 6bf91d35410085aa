"""Project field completeness rules.

Which project fields must be filled in depends on how far the target stage
is in the workflow: commercial fields only matter once the project is
being quoted.
"""

from dataclasses import dataclass
from decimal import Decimal

from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck

# Stage orders of the default catalog that switch on additional fields
QUOTED_ORDER = 4
ORDER_CONFIRMED_ORDER = 5


@dataclass(frozen=True)
class FieldRule:
    field: str
    name: str
    description: str
    required: bool
    from_order: int = 1  # first target stage order the rule applies to


PROJECT_FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("title", "Project title", "Project must have a title", required=True),
    FieldRule("customer_id", "Customer", "Project must be linked to a customer", required=True),
    FieldRule("description", "Project description", "A description helps reviewers", required=False),
    FieldRule("priority_level", "Priority", "Priority should be set for scheduling", required=False),
    FieldRule(
        "estimated_value",
        "Estimated value",
        "Estimated value is required once the project is quoted",
        required=True,
        from_order=QUOTED_ORDER,
    ),
    FieldRule(
        "due_date",
        "Due date",
        "Due date should be set once the order is confirmed",
        required=False,
        from_order=ORDER_CONFIRMED_ORDER,
    ),
)


def is_present(value) -> bool:
    """None, blank strings and non-positive numbers count as missing."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float, Decimal)):
        return value > 0
    return True


def evaluate_project_data(project, target_order: int, rules: tuple[FieldRule, ...] = PROJECT_FIELD_RULES) -> list[PrerequisiteCheck]:
    """One check per field rule that applies to a target stage at ``target_order``."""
    checks = []
    for rule in rules:
        if target_order < rule.from_order:
            continue
        present = is_present(getattr(project, rule.field, None))
        checks.append(
            PrerequisiteCheck(
                id=f"project_{rule.field}",
                category=CheckCategory.PROJECT_DATA,
                name=rule.name,
                description=rule.description,
                required=rule.required,
                status=CheckStatus.PASSED if present else CheckStatus.FAILED,
                details=None if present else f"{rule.name} is missing",
            )
        )
    return checks
