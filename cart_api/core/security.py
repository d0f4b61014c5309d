import uuid
from dataclasses import dataclass
from typing import Optional

from cart_api.core.exceptions import InvalidTokenError, PermissionDeniedError


ACCESS_TOKEN_HEADER = "x-cocart-access-token"


def generate_cart_key() -> str:
    """Generate a key identifying a cart session."""
    return uuid.uuid4().hex


def is_uuid(value: str) -> bool:
    """Check whether a string is a UUID in canonical 8-4-4-4-12 form."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


@dataclass(frozen=True)
class AccessContext:
    """Access-token state for a single request.

    Built once per request from settings and headers and passed explicitly
    to the permission check.
    """
    require_access_token: bool
    access_token: str
    requested_token: Optional[str] = None

    @property
    def enforced(self) -> bool:
        return self.require_access_token and bool(self.access_token)


def check_api_permission(context: AccessContext) -> bool:
    """
    Check whether the access token is required before proceeding
    with the request or allow unauthorized access.

    Raises:
        InvalidTokenError: a token was sent but is not a UUID
        PermissionDeniedError: the token is missing or does not match
    """
    if not context.enforced:
        return True

    requested = context.requested_token
    if requested and not is_uuid(requested):
        raise InvalidTokenError()

    if requested != context.access_token:
        raise PermissionDeniedError()

    return True
