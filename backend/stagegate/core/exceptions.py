class StageGateError(Exception):
    """Base exception for the stage gate engine."""

    status_code = 500


class NotFoundError(StageGateError):
    """Raised when a project or workflow stage id does not resolve."""

    status_code = 404

    def __init__(self, resource: str, resource_id: object):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class CategoryEvaluationError(StageGateError):
    """Raised when a prerequisite category cannot be computed.

    The prerequisite checker contains it and substitutes a failed system check.
    """

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"Could not evaluate {category} checks: {reason}")


class PermissionDenied(StageGateError):
    """Raised when a transition is confirmed without the capability to proceed."""

    status_code = 403

    def __init__(self, user_id: str, resource: str, action: str, reason: str | None = None):
        self.user_id = user_id
        self.resource = resource
        self.action = action
        msg = f"User {user_id} lacks {resource}:{action}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class PreconditionError(StageGateError):
    """Raised when a confirm cannot go ahead: a bypass without a reason, or a
    project that changed stage after its verdict was computed."""

    status_code = 422


class PersistenceError(StageGateError):
    """Raised when a stage history write fails."""

    def __init__(self, project_id: object, reason: str):
        self.project_id = project_id
        self.reason = reason
        super().__init__(f"Stage history write failed for project {project_id}: {reason}")


class ConcurrencyAnomaly(StageGateError):
    """More than one open stage history entry exists for a project.

    Logged by the ledger, never auto-healed.
    """

    def __init__(self, project_id: object, open_entry_ids: list):
        self.project_id = project_id
        self.open_entry_ids = open_entry_ids
        super().__init__(f"Project {project_id} has {len(open_entry_ids)} open stage history entries")


class StageRuleConfigurationError(StageGateError):
    """Raised at startup when a registered stage has no stage-specific rule entry."""

    def __init__(self, missing_slugs: list[str]):
        self.missing_slugs = missing_slugs
        super().__init__(f"No stage rule set configured for stages: {', '.join(missing_slugs)}")
