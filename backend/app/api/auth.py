"""Bearer-token auth dependencies.

Tokens are the opaque strings issued by POST /auth/signin and are resolved
through the AccountService on every request.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from backend.app.accounts.service import AccountService
from backend.app.api.deps import get_account_service
from backend.app.db.context import RequestContext


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Extract the raw token from an Authorization header.

    Raises:
        HTTPException: If the header is present but not a Bearer token
    """
    if not authorization:
        return None

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")

    token = authorization[7:].strip()  # Strip "Bearer "
    if not token:
        raise _unauthorized("Invalid authorization header format")
    return token


async def get_optional_context(
    token: Annotated[str | None, Depends(get_bearer_token)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> RequestContext | None:
    """Resolve the caller if a token was sent; guests get None.

    Raises:
        HTTPException: If a token was sent but is unknown, revoked or expired
    """
    if token is None:
        return None

    identity = await service.resolve(token)
    if identity is None:
        raise _unauthorized("Invalid or expired token")

    return RequestContext(user_id=uuid.UUID(identity.user_id), email=identity.email)


async def get_current_context(
    ctx: Annotated[RequestContext | None, Depends(get_optional_context)],
) -> RequestContext:
    """Require an authenticated caller.

    Raises:
        HTTPException: 401 if no valid bearer token was sent
    """
    if ctx is None:
        raise _unauthorized("Not authenticated")
    return ctx
