"""Identity directory: maps verified external identities to local users."""

import sqlite3
from typing import Callable, Optional

from common.logging_config import get_logger
from shareline.exceptions import AuthenticationRequiredError, ConflictError, StorageFailureError
from shareline.repositories.user_repository import User, UserRepository
from shareline.utils import utcnow

logger = get_logger(__name__)

DEFAULT_DISPLAY_NAME = "User"


class IdentityService:
    def __init__(self, clock: Callable = utcnow):
        self.user_repo = UserRepository()
        self.clock = clock

    def reconcile(self, external_id: Optional[str], name: Optional[str] = None, email: Optional[str] = None) -> User:
        """
        Return the local user for an external identity, creating or updating it.

        Repeated calls with identical claims perform no writes. Claims that are
        missing never overwrite stored values.

        Args:
            external_id: Stable key issued by the identity provider
            name: Asserted display name
            email: Asserted contact address

        Returns:
            The reconciled User

        Raises:
            AuthenticationRequiredError: If no external id was asserted
            StorageFailureError: If the user cannot be persisted
        """
        if not external_id:
            raise AuthenticationRequiredError("Identity assertion carries no external id")

        try:
            user = self.user_repo.get_by_external_id(external_id)
            if user is None:
                user = self._create(external_id, name, email)
            return self._sync_profile(user, name, email)
        except sqlite3.Error as e:
            logger.error(f"Identity reconciliation failed [external_id={external_id}]: {e}", exc_info=True)
            raise StorageFailureError("Could not persist user") from e

    def _create(self, external_id: str, name: Optional[str], email: Optional[str]) -> User:
        display_name = name or email or DEFAULT_DISPLAY_NAME
        try:
            return self.user_repo.create_user(
                external_id=external_id,
                name=display_name,
                email=email or "",
                created_at=self.clock(),
            )
        except ConflictError:
            # A concurrent first login inserted the row between our read and insert.
            logger.info(f"Lost creation race, re-reading user [external_id={external_id}]")
            user = self.user_repo.get_by_external_id(external_id)
            if user is None:
                raise StorageFailureError(f"User '{external_id}' vanished after insert conflict")
            return user

    def _sync_profile(self, user: User, name: Optional[str], email: Optional[str]) -> User:
        updated = False
        if email is not None and email != user.email:
            user.email = email
            updated = True
        if name is not None and name != user.name:
            user.name = name
            updated = True

        if updated:
            logger.info(f"Updating profile from identity claims [user_id={user.user_id}]")
            user.updated_at = self.clock()
            self.user_repo.update_profile(user.user_id, user.name, user.email, user.updated_at)

        return user
