"""Authentication API routes."""

from typing import Optional

from fastapi import APIRouter, Depends

from shareline.auth import get_optional_user
from shareline.repositories.user_repository import User
from shareline.schemas.auth import CurrentUserResponse

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.get("/user", response_model=CurrentUserResponse, response_model_exclude_none=True)
async def current_user(user: Optional[User] = Depends(get_optional_user)):
    """
    Report the local user behind the asserted identity.

    Returns:
        - authenticated: False with a message when no identity is asserted
        - id, email, name of the reconciled user otherwise
    """
    if user is None:
        return CurrentUserResponse(authenticated=False, message="User not authenticated")

    return CurrentUserResponse(
        authenticated=True,
        id=user.user_id,
        email=user.email,
        name=user.name,
    )


@router.get("/test")
async def test():
    """
    Reachability check that needs no identity.
    """
    return {"status": "ok", "message": "API is accessible"}
