"""Minimal auth dependency.

Identity is issued by the social login providers, which are outside this
service; the bearer token is taken to be the signed-in user's uid.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.db.context import RequestContext

DEV_USER_ID = "dev-user"


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    - "Bearer <uid>" resolves to that user
    - No header resolves to the development user

    Args:
        authorization: Authorization header (e.g., "Bearer <uid>")

    Returns:
        RequestContext with user_id

    Raises:
        HTTPException: If authorization is malformed
    """
    if not authorization:
        return RequestContext(user_id=DEV_USER_ID)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Empty bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(user_id=token)
