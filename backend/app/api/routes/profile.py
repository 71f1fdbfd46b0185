"""Profile endpoints - read the caller's profile and lower its credit balance."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_profile_store
from backend.app.db.context import RequestContext
from backend.app.db.repositories import ProfileStore, StorageError
from backend.app.models.documents import UserProfile

router = APIRouter(prefix="/profile", tags=["profile"])

CREDITS_INCREASE_MESSAGE = "Credits can only be decreased"


class UpdateProfileRequest(BaseModel):
    """Request body for PATCH /profile."""

    credits_remaining: int = Field(..., ge=0)


async def _load_profile(profiles: ProfileStore, user_id: str) -> UserProfile:
    try:
        profile = await profiles.get(user_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.get("", response_model=UserProfile)
async def get_profile(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    profiles: Annotated[ProfileStore, Depends(get_profile_store)],
) -> UserProfile:
    """Return the caller's profile."""
    return await _load_profile(profiles, str(ctx.user_id))


@router.patch("", response_model=UserProfile)
async def update_profile(
    body: UpdateProfileRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    profiles: Annotated[ProfileStore, Depends(get_profile_store)],
) -> UserProfile:
    """Set the caller's credit balance. Credits can be spent here, never added.

    Raises:
        HTTPException: 404 if no profile, 403 if the balance would increase,
            503 on storage failure
    """
    current = await _load_profile(profiles, str(ctx.user_id))
    if body.credits_remaining > current.credits_remaining:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CREDITS_INCREASE_MESSAGE)

    try:
        return await profiles.update_credits(str(ctx.user_id), body.credits_remaining)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
