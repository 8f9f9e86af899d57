"""
Trigger Service

Orchestrates the slash commands:
1. /create-trigger  - parse a definition and store it
2. /trigger         - load a stored trigger and apply it to every linked Slack account
3. /list-triggers   - show the user's triggers
4. /clear-status    - reset presence, status and DND everywhere
5. /delete-trigger  - remove a stored trigger
6. /link-slack      - start OAuth for one more Slack account
plus the OAuth callback that links a Slack account to an internal user.

Collaborators are passed in at construction; nothing here talks to Slack or
storage directly.
"""

import logging
import uuid
from typing import List, Optional

from app.config import Settings
from app.core.errors import (
    ActionApplyError,
    CollaboratorTransportError,
    PartialFanOutFailure,
    SlackOverloadError,
    TriggerNotFoundError,
    UnauthorizedIdentityError,
    UserInputError,
)
from app.core.fanout import FanOutCoordinator
from app.core.template_parser import USAGE_EXAMPLE, is_trigger_name, parse_template
from app.integrations.slack.models import SlackPayload
from app.integrations.slack.oauth import OAuthExchange, build_authorize_url
from app.models.api_responses import SlackMessageResponse
from app.models.trigger import CLEAR_STATUS_ACTION, Action, ActionTemplate
from app.models.user import AccessCredential
from app.services.credential_store import CredentialStore
from app.services.template_store import TemplateStore
from app.services.user_store import UserRecordStore
from app.utils.helpers import sign_value, unsign_value

logger = logging.getLogger(__name__)


class TriggerService:
    """
    Handles every slash command for one request. Holds no per-request state.
    """

    def __init__(
        self,
        templates: TemplateStore,
        users: UserRecordStore,
        credentials: CredentialStore,
        fanout: FanOutCoordinator,
        oauth: OAuthExchange,
        settings: Settings,
    ):
        self.templates = templates
        self.users = users
        self.credentials = credentials
        self.fanout = fanout
        self.oauth = oauth
        self.settings = settings

    # ── Commands ──────────────────────────────────────────

    async def create_trigger(
        self, payload: SlackPayload, definition: str
    ) -> SlackMessageResponse:
        """Parse a trigger definition and save it, replacing any trigger with the same name."""
        self._log_command("/create-trigger", payload, repr(definition))
        user_id = await self.credentials.lookup_user_id(payload.slack_id)

        if not definition.strip():
            raise UserInputError(f"Tell me what to create, for example: {USAGE_EXAMPLE}")

        template = parse_template(definition)
        template = template.model_copy(update={"team_id": payload.team_id})
        await self.templates.put(user_id, template)

        logger.info(f"Saved trigger {template.name} for user {user_id}")
        return SlackMessageResponse.markdown(
            f"Created trigger *{template.name}*\n`{template.summary()}`"
        )

    async def trigger(self, payload: SlackPayload, name: str) -> SlackMessageResponse:
        """Apply a stored trigger to every linked Slack account."""
        self._log_command("/trigger", payload, name)
        user_id = await self.credentials.lookup_user_id(payload.slack_id)
        name = self._require_name(name, "/trigger vacation")

        template = await self.templates.get(user_id, name)
        await self._apply_everywhere(payload, user_id, template.action)

        emoji = template.action.status_emoji
        return SlackMessageResponse.markdown(f"Triggered *{template.name}* {emoji}".rstrip())

    async def list_triggers(self, payload: SlackPayload) -> SlackMessageResponse:
        self._log_command("/list-triggers", payload)
        user_id = await self.credentials.lookup_user_id(payload.slack_id)

        names = await self.templates.list_names(user_id)
        if not names:
            return SlackMessageResponse.markdown(
                f"You have not defined any triggers yet. Try `{USAGE_EXAMPLE}`"
            )

        templates: List[ActionTemplate] = []
        for name in names:
            templates.append(await self.templates.get(user_id, name))

        lines = "\n".join(f"• `{t.summary()}`" for t in templates)
        return SlackMessageResponse.markdown(
            "Here are the triggers that you have defined:", lines
        )

    async def clear_status(self, payload: SlackPayload) -> SlackMessageResponse:
        """Set presence to active and clear status and DND. Does not read any stored trigger."""
        self._log_command("/clear-status", payload)
        user_id = await self.credentials.lookup_user_id(payload.slack_id)

        await self._apply_everywhere(payload, user_id, CLEAR_STATUS_ACTION)
        return SlackMessageResponse.markdown("Your status has been cleared :boom:")

    async def delete_trigger(self, payload: SlackPayload, name: str) -> SlackMessageResponse:
        self._log_command("/delete-trigger", payload, name)
        user_id = await self.credentials.lookup_user_id(payload.slack_id)
        name = self._require_name(
            name,
            "/delete-trigger vacation",
            f"Could not delete trigger {name.strip()!r} because it is not defined",
        )

        await self.templates.delete(user_id, name)

        logger.info(f"Deleted trigger {name} for user {user_id}")
        return SlackMessageResponse.markdown(f"Deleted trigger *{name}*")

    async def link_slack(self, payload: SlackPayload) -> SlackMessageResponse:
        """Reply with an OAuth link that attaches another Slack account to this user."""
        self._log_command("/link-slack", payload)
        user_id = await self.credentials.lookup_user_id(payload.slack_id)

        link = build_authorize_url(
            self.settings.oauth_authorize_url,
            self.settings.slack_client_id,
            self.settings.oauth_user_scopes,
            state=self.sign_state(user_id),
            redirect_uri=self.settings.oauth_redirect_url,
        )
        return SlackMessageResponse.markdown(
            "Click the link below to associate another Slack account with this account.\n\n"
            f"<{link}|Link Slack Account>"
        )

    # ── OAuth ─────────────────────────────────────────────

    async def complete_oauth(self, code: str, state: str = "") -> str:
        """
        Finish the OAuth flow: store the new token and link the Slack account.

        The internal user id is, in order of preference, the owner already
        recorded for this Slack account, the user named by a valid signed
        state, or a new id.

        Returns:
            The internal user id the Slack account is linked to
        """
        if not code:
            raise UserInputError("missing OAuth authorization code")

        grant = await self.oauth.exchange(code)
        logger.info(f"OAuth grant for {grant.slack_id} on {grant.team_name}({grant.team_id})")

        user_id = await self._existing_owner(grant.slack_id)
        if not user_id and state:
            user_id = self.verify_state(state)
            if not user_id:
                logger.warning(f"Ignoring OAuth state with a bad signature for {grant.slack_id}")
        if not user_id:
            user_id = str(uuid.uuid4())
            logger.info(f"Created user {user_id} for {grant.slack_id}")

        await self.credentials.set(
            AccessCredential(
                slack_id=grant.slack_id,
                access_token=grant.access_token,
                user_id=user_id,
                team_id=grant.team_id,
                scopes=grant.scopes,
            )
        )

        user = await self.users.get(user_id)
        if user.add_linked_identity(grant.slack_id, grant.team_id):
            try:
                await self.users.put(user)
            except CollaboratorTransportError as e:
                raise CollaboratorTransportError(
                    f"error saving user mapping for {user_id} -> {grant.slack_id}: {e}"
                ) from e

        return user_id

    def sign_state(self, user_id: str) -> str:
        return sign_value(user_id, self.settings.session_key)

    def verify_state(self, state: str) -> Optional[str]:
        if not self.settings.session_key:
            return None
        return unsign_value(state, self.settings.session_key)

    # ── Helpers ───────────────────────────────────────────

    async def _apply_everywhere(
        self, payload: SlackPayload, user_id: str, action: Action
    ) -> None:
        identities = await self.fanout.linked_identities(user_id)
        if not identities:
            raise UnauthorizedIdentityError(
                payload.slack_id, f"user {user_id} has no linked Slack accounts"
            )
        await self.fanout.apply_to_identities(user_id, identities, action)

    async def _existing_owner(self, slack_id: str) -> str:
        try:
            return await self.credentials.lookup_user_id(slack_id)
        except UnauthorizedIdentityError:
            return ""

    @staticmethod
    def _require_name(name: str, example: str, unknown_message: Optional[str] = None) -> str:
        name = name.strip()
        if not name:
            raise UserInputError(f"Which trigger? For example: `{example}`")
        # Anything /create-trigger would not accept can never have been stored
        if not is_trigger_name(name):
            raise TriggerNotFoundError(name, unknown_message)
        return name

    @staticmethod
    def _log_command(command: str, payload: SlackPayload, argument: str = "") -> None:
        if argument:
            command = f"{command} {argument}"
        logger.info(
            f"{command} from {payload.user_name}({payload.slack_id}) "
            f"on {payload.team_name}({payload.team_id})"
        )


# ── Error rendering ───────────────────────────────────────

NOT_REGISTERED_TEXT = (
    "Your account hasn't activated the Slack Overload app yet.\n\n"
    ":heavy_plus_sign: *New Users*\nFollow the <{quickstart}|QuickStart> to get started.\n\n"
    ":link: *Existing Users*\nRun `/link-slack` from another Slack account that is already "
    "activated to link it to this account."
)


def error_response(error: Exception, quickstart_url: str) -> SlackMessageResponse:
    """Turn any error raised while handling a command into the reply the user sees."""
    if isinstance(error, UnauthorizedIdentityError):
        logger.info(f"User not registered: {error}")
        return SlackMessageResponse.markdown(NOT_REGISTERED_TEXT.format(quickstart=quickstart_url))

    if isinstance(error, UserInputError):
        return SlackMessageResponse.plain(str(error))

    if isinstance(error, PartialFanOutFailure):
        logger.error(f"Fan-out failed: {error}")
        lines = "\n".join(
            f"• team {f.team_id}: {_describe(f.error)}" for f in error.failures
        )
        return SlackMessageResponse.markdown(
            "Some of your Slack accounts could not be updated:", lines
        )

    if isinstance(error, SlackOverloadError):
        logger.error(f"Command failed: {error}")
    else:
        logger.error(f"Unexpected error handling command: {error}", exc_info=error)
    return SlackMessageResponse.plain(
        "Something went wrong on our end and your request could not be completed. "
        "Please try again later."
    )


def _describe(error: BaseException) -> str:
    if isinstance(error, ActionApplyError):
        return ", ".join(str(f) for f in error.failures)
    if isinstance(error, UnauthorizedIdentityError):
        return "this account needs to be linked again"
    return str(error)
