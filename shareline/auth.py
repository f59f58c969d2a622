"""Identity assertion handling at the HTTP boundary."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from common.logging_config import get_logger
from shareline import config
from shareline.exceptions import AuthenticationRequiredError
from shareline.repositories.user_repository import User
from shareline.services.identity_service import IdentityService

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityAssertion:
    """
    Claims of an already authenticated identity.
    """
    external_id: str
    name: Optional[str] = None
    email: Optional[str] = None


def _header(request: Request, name: str) -> Optional[str]:
    value = request.headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def read_identity_assertion(request: Request) -> Optional[IdentityAssertion]:
    """
    Read the identity asserted by the authenticating reverse proxy.

    Args:
        request: Incoming request

    Returns:
        The assertion, or None when the request is anonymous
    """
    external_id = _header(request, config.IDENTITY_HEADER)
    if external_id is None:
        return None

    return IdentityAssertion(
        external_id=external_id,
        name=_header(request, config.NAME_HEADER),
        email=_header(request, config.EMAIL_HEADER),
    )


async def get_optional_user(request: Request) -> Optional[User]:
    """
    FastAPI dependency resolving the asserted identity to a local user, if any.
    """
    assertion = read_identity_assertion(request)
    if assertion is None:
        return None

    user = IdentityService().reconcile(assertion.external_id, assertion.name, assertion.email)
    request.state.user_id = user.user_id
    return user


async def get_current_user(request: Request) -> User:
    """
    FastAPI dependency requiring a verified identity.

    Raises:
        AuthenticationRequiredError: If the request carries no identity assertion
    """
    user = await get_optional_user(request)
    if user is None:
        raise AuthenticationRequiredError("User not authenticated")
    return user
