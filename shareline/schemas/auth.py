"""Pydantic schemas for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel


class CurrentUserResponse(BaseModel):
    """Response model for the current identity."""
    authenticated: bool
    id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None
    message: Optional[str] = None
