"""Tests for the role permission checker."""

import pytest

from stagegate.core.auth import Actor
from stagegate.services.permissions import (
    BYPASS,
    SKIP_STAGES,
    WORKFLOW,
    PermissionChecker,
    RolePermissionChecker,
    get_permission_checker,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def checker() -> RolePermissionChecker:
    return RolePermissionChecker()


@pytest.mark.parametrize(
    ("roles", "action", "allowed"),
    [
        ({"sales"}, BYPASS, False),
        ({"manager"}, BYPASS, True),
        ({"manager"}, SKIP_STAGES, False),
        ({"management"}, SKIP_STAGES, True),
        ({"admin"}, SKIP_STAGES, True),
        ({"sales", "manager"}, BYPASS, True),
        (set(), BYPASS, False),
    ],
)
async def test_role_table(checker, roles, action, allowed):
    result = await checker.check_permission(Actor("u1", frozenset(roles)), WORKFLOW, action)
    assert result.allowed is allowed


async def test_reason_names_granting_role(checker):
    result = await checker.check_permission(Actor("u1", frozenset({"manager"})), WORKFLOW, BYPASS)
    assert result.reason == "granted by role manager"


async def test_custom_table():
    checker = RolePermissionChecker({"auditor": frozenset({"workflow:bypass"})})
    result = await checker.check_permission(Actor("u1", frozenset({"manager"})), WORKFLOW, BYPASS)
    assert result.allowed is False


def test_default_checker_satisfies_protocol():
    assert isinstance(get_permission_checker(), PermissionChecker)
