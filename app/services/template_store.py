"""
Trigger template store.

Templates live in the "triggers" blob container at "{user_id}/{name}" as JSON.
A missing blob surfaces as TriggerNotFoundError so callers can tell "the user
never defined this trigger" apart from a storage failure.
"""

import logging
from typing import List

from pydantic import ValidationError

from app.core.errors import (
    BlobNotFoundError,
    CollaboratorTransportError,
    TriggerNotFoundError,
)
from app.integrations.storage.blob import BlobStore
from app.models.trigger import ActionTemplate
from app.utils.helpers import run_blocking

logger = logging.getLogger(__name__)

TRIGGERS_CONTAINER = "triggers"


def trigger_key(user_id: str, name: str) -> str:
    return f"{user_id}/{name}"


class TemplateStore:
    def __init__(self, blobs: BlobStore, timeout: float = 3.0):
        self.blobs = blobs
        self.timeout = timeout

    async def get(self, user_id: str, name: str) -> ActionTemplate:
        key = trigger_key(user_id, name)
        try:
            data = await run_blocking(
                self.blobs.get_blob,
                TRIGGERS_CONTAINER,
                key,
                timeout=self.timeout,
                context=f"downloading {TRIGGERS_CONTAINER}/{key}",
            )
        except BlobNotFoundError:
            raise TriggerNotFoundError(name) from None

        try:
            return ActionTemplate.from_json(data)
        except ValidationError as e:
            logger.error(f"Stored trigger {key} is not valid JSON: {e}")
            raise CollaboratorTransportError(
                f"error unmarshaling trigger {name}: {data!r}"
            ) from e

    async def put(self, user_id: str, template: ActionTemplate) -> None:
        """Save a template, overwriting any trigger with the same name."""
        key = trigger_key(user_id, template.name)
        await run_blocking(
            self.blobs.set_blob,
            TRIGGERS_CONTAINER,
            key,
            template.to_json(),
            timeout=self.timeout,
            context=f"saving {TRIGGERS_CONTAINER}/{key}",
        )

    async def delete(self, user_id: str, name: str) -> None:
        key = trigger_key(user_id, name)
        try:
            await run_blocking(
                self.blobs.delete_blob,
                TRIGGERS_CONTAINER,
                key,
                timeout=self.timeout,
                context=f"deleting {TRIGGERS_CONTAINER}/{key}",
            )
        except BlobNotFoundError:
            raise TriggerNotFoundError(
                name, f"Could not delete trigger {name!r} because it is not defined"
            ) from None

    async def list_names(self, user_id: str) -> List[str]:
        """Names of all triggers the user has defined."""
        user_dir = f"{user_id}/"
        blob_names = await run_blocking(
            self.blobs.list_container,
            TRIGGERS_CONTAINER,
            user_dir,
            timeout=self.timeout,
            context=f"listing {TRIGGERS_CONTAINER}/{user_dir}",
        )
        return [name[len(user_dir):] for name in blob_names]
