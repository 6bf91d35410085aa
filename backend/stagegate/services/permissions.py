"""Permission checks for transition capabilities.

PermissionChecker is the protocol the transition service depends on.
RolePermissionChecker answers from a static role table; deployments with a
real permission service swap in their own implementation via the FastAPI
dependency below.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from stagegate.core.auth import Actor

WORKFLOW = "workflow"
ADVANCE = "advance"
BYPASS = "bypass"
SKIP_STAGES = "skip_stages"

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": frozenset({"workflow:*"}),
    "management": frozenset({"workflow:advance", "workflow:bypass", "workflow:skip_stages"}),
    "manager": frozenset({"workflow:advance", "workflow:bypass"}),
    "sales": frozenset({"workflow:advance"}),
    "engineering": frozenset({"workflow:advance"}),
    "qa": frozenset({"workflow:advance"}),
    "production": frozenset({"workflow:advance"}),
    "procurement": frozenset({"workflow:advance"}),
}


@dataclass(frozen=True)
class PermissionResult:
    allowed: bool
    reason: str = ""


@runtime_checkable
class PermissionChecker(Protocol):
    async def check_permission(self, actor: Actor, resource: str, action: str) -> PermissionResult:
        ...


class RolePermissionChecker:
    """Grants ``resource:action`` when any of the actor's roles holds it (or ``resource:*``)."""

    def __init__(self, role_permissions: Mapping[str, frozenset[str]] | None = None):
        self.role_permissions = ROLE_PERMISSIONS if role_permissions is None else role_permissions

    async def check_permission(self, actor: Actor, resource: str, action: str) -> PermissionResult:
        wanted = {f"{resource}:{action}", f"{resource}:*"}
        for role in sorted(actor.roles):
            if wanted & self.role_permissions.get(role, frozenset()):
                return PermissionResult(True, f"granted by role {role}")
        return PermissionResult(False, f"no role grants {resource}:{action}")


def get_permission_checker() -> PermissionChecker:
    """FastAPI dependency; override via app.dependency_overrides in tests."""
    return RolePermissionChecker()
