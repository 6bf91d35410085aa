import uuid

from stagegate.core.exceptions import NotFoundError


def parse_uuid(value: uuid.UUID | str, resource: str) -> uuid.UUID:
    """Coerce an id to UUID; malformed ids cannot resolve, so they are reported as not found."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(resource, value) from None
