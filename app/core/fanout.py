"""
Fan-Out Coordinator

Applies one Action to every Slack account linked to an internal user. Each
identity is updated concurrently (one task per identity, no cap) and every
task runs to completion; failures are collected with the identity's team so
the caller can say which linked accounts were not updated.
"""

import asyncio
import logging
from typing import List, Protocol

from app.core.applier import ActionApplier
from app.core.errors import IdentityFailure, PartialFanOutFailure
from app.models.trigger import Action
from app.models.user import AccessCredential, LinkedIdentity, User

logger = logging.getLogger(__name__)


class UserSource(Protocol):
    async def get(self, user_id: str) -> User: ...


class CredentialSource(Protocol):
    async def get(self, slack_id: str) -> AccessCredential: ...


class FanOutCoordinator:
    def __init__(
        self,
        users: UserSource,
        credentials: CredentialSource,
        applier: ActionApplier,
    ):
        self.users = users
        self.credentials = credentials
        self.applier = applier

    async def linked_identities(self, user_id: str) -> List[LinkedIdentity]:
        user = await self.users.get(user_id)
        return list(user.slack_users)

    async def apply_to_all_linked_identities(
        self, user_id: str, action: Action
    ) -> List[LinkedIdentity]:
        """
        Apply an action to every linked Slack identity of a user.

        A user with no linked identities is not an error here; the caller
        checks that precondition before fanning out.

        Returns:
            The identities that were updated

        Raises:
            PartialFanOutFailure: If one or more identities failed. Identities
                that succeeded are not rolled back.
        """
        identities = await self.linked_identities(user_id)
        return await self.apply_to_identities(user_id, identities, action)

    async def apply_to_identities(
        self, user_id: str, identities: List[LinkedIdentity], action: Action
    ) -> List[LinkedIdentity]:
        """Apply an action to an already-resolved list of identities of one user."""
        if not identities:
            logger.info(f"User {user_id} has no linked Slack accounts, nothing to update")
            return []

        results = await asyncio.gather(
            *(self._apply_one(identity, action) for identity in identities),
            return_exceptions=True,
        )

        failures: List[IdentityFailure] = []
        succeeded: List[LinkedIdentity] = []
        for identity, result in zip(identities, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures.append(IdentityFailure(identity.id, identity.team_id, result))
            else:
                succeeded.append(identity)

        if failures:
            logger.error(
                f"Updated {len(succeeded)} of {len(identities)} Slack accounts for "
                f"user {user_id}; failed: {[str(f) for f in failures]}"
            )
            raise PartialFanOutFailure(failures, [i.id for i in succeeded])

        logger.info(f"Updated {len(succeeded)} Slack accounts for user {user_id}")
        return succeeded

    async def _apply_one(self, identity: LinkedIdentity, action: Action) -> None:
        credential = await self.credentials.get(identity.id)
        await self.applier.apply(credential, action)
