"""
Action Applier

Applies one Action to one Slack identity with three independent mutations:
1. Presence
2. Custom status (text, emoji and auto-clear time)
3. Do-not-disturb

The three run concurrently and a failure in one does not stop the others.
This is not a transaction: if presence succeeds and status fails, presence
stays changed and the status failure is reported.
"""

import asyncio
import logging
from typing import Awaitable, List, Optional

from app.core.errors import ActionApplyError, SubOperationFailure
from app.integrations.slack.status_api import ExternalStatusAPI
from app.models.trigger import Action
from app.models.user import AccessCredential

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE_MINUTES = 60


class ActionApplier:
    """Issues the presence / status / DND mutations for one identity."""

    def __init__(
        self,
        status_api: ExternalStatusAPI,
        call_timeout: Optional[float] = None,
        default_snooze_minutes: int = DEFAULT_SNOOZE_MINUTES,
        debug: bool = False,
    ):
        self.status_api = status_api
        self.call_timeout = call_timeout
        self.default_snooze_minutes = default_snooze_minutes
        self.debug = debug

    async def apply(self, credential: AccessCredential, action: Action) -> None:
        """
        Apply an action to the identity the credential belongs to.

        Raises:
            ActionApplyError: If any of the three mutations failed, listing each one
        """
        logger.info(
            f"Updating slack status for {credential.user_id} ({credential.slack_id}) "
            f"on team {credential.team_id}"
        )
        if self.debug:
            logger.debug(f"Action for {credential.slack_id}: {action!r}")

        operations = {
            "presence": self._set_presence(credential, action),
            "status": self._set_status(credential, action),
            "dnd": self._set_dnd(credential, action),
        }
        results = await asyncio.gather(*operations.values(), return_exceptions=True)

        failures: List[SubOperationFailure] = []
        for operation, result in zip(operations, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    f"Could not set {operation} for {credential.slack_id}: {result}"
                )
                failures.append(SubOperationFailure(operation, result))

        if failures:
            raise ActionApplyError(credential.slack_id, failures)

    async def _bounded(self, call: Awaitable) -> object:
        if self.call_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.call_timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"no response from Slack after {self.call_timeout}s"
            ) from None

    async def _set_presence(self, credential: AccessCredential, action: Action) -> None:
        await self._bounded(self.status_api.set_presence(credential, action.presence))

    async def _set_status(self, credential: AccessCredential, action: Action) -> None:
        await self._bounded(
            self.status_api.set_custom_status(
                credential,
                action.status_text,
                action.status_emoji,
                action.applied_minutes,
            )
        )

    async def _set_dnd(self, credential: AccessCredential, action: Action) -> None:
        if action.dnd:
            # Re-snoozing resets the window, so this is safe to repeat
            minutes = action.applied_minutes if action.duration else self.default_snooze_minutes
            await self._bounded(self.status_api.start_snooze(credential, minutes))
            return

        # Only end a snooze that is actually running
        state = await self._bounded(self.status_api.get_dnd_state(credential))
        if state.snooze_enabled:
            await self._bounded(self.status_api.end_snooze(credential))
