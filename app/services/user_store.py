"""
User record store.

Users live in the "users" blob container keyed by internal user id. A user
that has no record yet is returned as an empty User rather than an error.
"""

from pydantic import ValidationError

from app.core.errors import BlobNotFoundError, CollaboratorTransportError
from app.integrations.storage.blob import BlobStore
from app.models.user import User
from app.utils.helpers import run_blocking

USERS_CONTAINER = "users"


class UserRecordStore:
    def __init__(self, blobs: BlobStore, timeout: float = 3.0):
        self.blobs = blobs
        self.timeout = timeout

    async def get(self, user_id: str) -> User:
        try:
            data = await run_blocking(
                self.blobs.get_blob,
                USERS_CONTAINER,
                user_id,
                timeout=self.timeout,
                context=f"downloading {USERS_CONTAINER}/{user_id}",
            )
        except BlobNotFoundError:
            return User(id=user_id)

        try:
            return User.from_json(data)
        except ValidationError as e:
            raise CollaboratorTransportError(
                f"error parsing user configuration for {user_id!r}"
            ) from e

    async def put(self, user: User) -> None:
        if not user.id:
            raise CollaboratorTransportError("cannot save user, no ID was given")

        await run_blocking(
            self.blobs.set_blob,
            USERS_CONTAINER,
            user.id,
            user.to_json(),
            timeout=self.timeout,
            context=f"saving {USERS_CONTAINER}/{user.id}",
        )
