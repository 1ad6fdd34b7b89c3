"""Request context for per-user data access."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the signed-in user's identity.

    Favorites are scoped to this user id (the identity provider's uid).
    """

    user_id: str
