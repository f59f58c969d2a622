"""Utility helper functions for ShareLine."""

import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

from shareline import config


def generate_uuid() -> str:
    """
    Generate a new UUID4 hex string.

    Returns:
        32 character hex string
    """
    return uuid.uuid4().hex


def generate_share_token() -> str:
    """
    Generate an unguessable URL-safe share capability token.

    Returns:
        Token string
    """
    return secrets.token_urlsafe(config.SHARE_TOKEN_BYTES)


def utcnow() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize a datetime for storage. Microseconds are always written so that
    stored values sort lexicographically.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
