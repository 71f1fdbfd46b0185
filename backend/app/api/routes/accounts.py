"""Auth endpoints - sign-up, sign-in, sign-out and session lookup."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from backend.app.accounts.service import AccountService, AuthError
from backend.app.api.auth import get_bearer_token, get_current_context
from backend.app.api.deps import get_account_service
from backend.app.db.context import RequestContext

router = APIRouter(prefix="/auth", tags=["auth"])


class Credentials(BaseModel):
    """Request body for sign-up and sign-in."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class IdentityResponse(BaseModel):
    """Authenticated user identity."""

    user_id: str
    email: str


class SessionResponse(BaseModel):
    """Response for POST /auth/signin."""

    access_token: str
    token_type: str = "bearer"
    user: IdentityResponse


@router.post("/signup", response_model=IdentityResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    body: Credentials,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> IdentityResponse:
    """Register an account. The caller still has to sign in."""
    try:
        identity = await service.sign_up(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    return IdentityResponse(user_id=identity.user_id, email=identity.email)


@router.post("/signin", response_model=SessionResponse)
async def sign_in(
    body: Credentials,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> SessionResponse:
    """Verify credentials and issue a bearer token."""
    try:
        session = await service.sign_in(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e

    return SessionResponse(
        access_token=session.access_token,
        user=IdentityResponse(user_id=session.user.user_id, email=session.user.email),
    )


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    token: Annotated[str | None, Depends(get_bearer_token)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> Response:
    """Revoke the caller's token. Signing out without a token is a no-op."""
    if token is not None:
        await service.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/session", response_model=IdentityResponse)
async def get_session_identity(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> IdentityResponse:
    """Return the identity behind the bearer token."""
    return IdentityResponse(user_id=str(ctx.user_id), email=ctx.email)
