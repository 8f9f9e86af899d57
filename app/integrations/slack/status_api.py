"""
Slack Status API

Presence, custom status and do-not-disturb calls made with a linked user's
own OAuth token:
- users.setPresence
- users.profile.set (status_text / status_emoji / status_expiration)
- dnd.info, dnd.setSnooze, dnd.endSnooze

slack_sdk's WebClient is synchronous, so every call runs in a worker thread.
"""

import asyncio
import logging
import time
from typing import Optional, Protocol

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from app.integrations.slack.models import DndState
from app.models.trigger import Presence
from app.models.user import AccessCredential

logger = logging.getLogger(__name__)


class ExternalStatusAPI(Protocol):
    """Mutations the applier issues against one Slack identity."""

    async def set_presence(self, credential: AccessCredential, presence: Presence) -> None: ...

    async def set_custom_status(
        self, credential: AccessCredential, text: str, emoji: str, duration_minutes: int
    ) -> None: ...

    async def get_dnd_state(self, credential: AccessCredential) -> DndState: ...

    async def start_snooze(self, credential: AccessCredential, minutes: int) -> None: ...

    async def end_snooze(self, credential: AccessCredential) -> None: ...


def status_expiration(duration_minutes: int, now: Optional[float] = None) -> int:
    """Unix time at which Slack should clear the status; 0 means never."""
    if duration_minutes <= 0:
        return 0
    if now is None:
        now = time.time()
    return int(now) + duration_minutes * 60


class SlackStatusAPI:
    """ExternalStatusAPI backed by the Slack Web API."""

    def __init__(self, timeout: int = 10, base_url: Optional[str] = None):
        self.timeout = timeout
        self.base_url = base_url

    def _client(self, credential: AccessCredential) -> WebClient:
        kwargs = {"token": credential.access_token, "timeout": int(self.timeout)}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return WebClient(**kwargs)

    async def _call(self, credential: AccessCredential, method: str, **params):
        client = self._client(credential)
        try:
            return await asyncio.to_thread(getattr(client, method), **params)
        except SlackApiError as e:
            logger.error(
                f"Slack API error calling {method} for {credential.slack_id}: "
                f"{e.response.get('error')}"
            )
            raise

    async def set_presence(self, credential: AccessCredential, presence: Presence) -> None:
        await self._call(credential, "users_setPresence", presence=presence.value)

    async def set_custom_status(
        self, credential: AccessCredential, text: str, emoji: str, duration_minutes: int
    ) -> None:
        profile = {
            "status_text": text,
            "status_emoji": emoji,
            "status_expiration": status_expiration(duration_minutes),
        }
        await self._call(credential, "users_profile_set", profile=profile)

    async def get_dnd_state(self, credential: AccessCredential) -> DndState:
        result = await self._call(credential, "dnd_info", user=credential.slack_id)
        return DndState(snooze_enabled=bool(result.get("snooze_enabled", False)))

    async def start_snooze(self, credential: AccessCredential, minutes: int) -> None:
        await self._call(credential, "dnd_setSnooze", num_minutes=minutes)

    async def end_snooze(self, credential: AccessCredential) -> None:
        await self._call(credential, "dnd_endSnooze")
