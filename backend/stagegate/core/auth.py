"""Caller identity for FastAPI routes.

Authentication happens upstream: the gateway verifies the session and
forwards the user id and roles as headers. This module only turns those
headers into an ``Actor``.
"""

from dataclasses import dataclass, field

from fastapi import HTTPException, Request

from stagegate.core.config import get_settings


@dataclass(frozen=True)
class Actor:
    """The user performing a validation or transition."""

    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)


def parse_roles(raw: str | None) -> frozenset[str]:
    """Split a comma-separated roles header into a normalized set."""
    if not raw:
        return frozenset()
    return frozenset(r.strip().lower() for r in raw.split(",") if r.strip())


async def get_current_actor(request: Request) -> Actor:
    """FastAPI dependency returning the calling ``Actor``.

    Override this dependency in tests via app.dependency_overrides.

    Raises:
        HTTPException(401): identity header missing
    """
    settings = get_settings()
    user_id = request.headers.get(settings.user_id_header)
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing caller identity")

    actor = Actor(user_id=user_id, roles=parse_roles(request.headers.get(settings.user_roles_header)))
    request.state.user_id = actor.user_id
    return actor
