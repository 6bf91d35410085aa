"""Prerequisite check records and aggregation.

Pure domain logic with no external dependencies.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum


class CheckCategory(StrEnum):
    """Prerequisite categories, in evaluation order."""

    PROJECT_DATA = "project_data"
    DOCUMENTS = "documents"
    APPROVALS = "approvals"
    STAGE_SPECIFIC = "stage_specific"
    SYSTEM = "system"


class CheckStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


@dataclass(frozen=True)
class PrerequisiteCheck:
    """One evaluated condition for entering a stage.

    ``required`` decides whether a failure blocks the transition or only
    surfaces as a warning.
    """

    id: str
    category: CheckCategory
    name: str
    description: str
    required: bool
    status: CheckStatus
    details: str | None = None

    @property
    def message(self) -> str:
        return f"{self.name}: {self.details or self.description}"


@dataclass
class PrerequisiteResult:
    """Aggregated outcome of all prerequisite checks for a target stage."""

    checks: list[PrerequisiteCheck] = field(default_factory=list)
    required_passed: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(c.status == CheckStatus.PASSED for c in self.checks)

    @property
    def blockers(self) -> list[str]:
        """Names of failed required checks."""
        return [c.name for c in self.checks if c.required and c.status == CheckStatus.FAILED]

    def by_category(self, category: CheckCategory) -> list[PrerequisiteCheck]:
        return [c for c in self.checks if c.category == category]


def aggregate_checks(checks: Iterable[PrerequisiteCheck]) -> PrerequisiteResult:
    """Fold individual checks into a PrerequisiteResult.

    Rules:
        - required_passed is True only when every required check passed
          (vacuously True for an empty list)
        - errors hold one message per failed required check
        - warnings hold failed optional checks and pending required checks
        - checks keep their input order
    """
    checks = list(checks)
    errors: list[str] = []
    warnings: list[str] = []

    for check in checks:
        if check.status == CheckStatus.FAILED:
            (errors if check.required else warnings).append(check.message)
        elif check.status == CheckStatus.PENDING and check.required:
            warnings.append(check.message)

    required_passed = all(c.status == CheckStatus.PASSED for c in checks if c.required)
    return PrerequisiteResult(checks=checks, required_passed=required_passed, errors=errors, warnings=warnings)


def unavailable_check(category: CheckCategory | str, reason: str) -> PrerequisiteCheck:
    """Failed system check standing in for a category that could not be evaluated."""
    category = str(category)
    return PrerequisiteCheck(
        id=f"{category}_unavailable",
        category=CheckCategory.SYSTEM,
        name=f"{category.replace('_', ' ').capitalize()} checks",
        description=f"Could not evaluate {category} prerequisites",
        required=True,
        status=CheckStatus.FAILED,
        details=reason,
    )
