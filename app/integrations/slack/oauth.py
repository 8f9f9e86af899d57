"""
Slack OAuth Exchange

Turns the authorization code from the "Add to Slack" redirect into a user
token with oauth.v2.access. This is the only place a fresh token enters the
system; everything after it is keyed by the returned Slack user id.
"""

import asyncio
import logging
from typing import Optional, Protocol
from urllib.parse import urlencode

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from app.core.errors import CollaboratorTransportError
from app.integrations.slack.models import OAuthGrant

logger = logging.getLogger(__name__)


class OAuthExchange(Protocol):
    async def exchange(self, code: str) -> OAuthGrant: ...


class SlackOAuthExchange:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str = "",
        client: Optional[WebClient] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.client = client or WebClient()

    async def exchange(self, code: str) -> OAuthGrant:
        params = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        if self.redirect_uri:
            params["redirect_uri"] = self.redirect_uri

        try:
            result = await asyncio.to_thread(self.client.oauth_v2_access, **params)
        except SlackApiError as e:
            logger.error(f"Slack API error requesting oauth token: {e.response.get('error')}")
            raise CollaboratorTransportError(
                f"error requesting oauth token: {e.response.get('error')}"
            ) from e

        team = result.get("team") or {}
        user = result.get("authed_user") or {}
        if not user.get("id") or not user.get("access_token"):
            raise CollaboratorTransportError(
                "oauth token response did not include an authorized user token"
            )

        return OAuthGrant(
            slack_id=user["id"],
            team_id=team.get("id", ""),
            team_name=team.get("name", ""),
            access_token=user["access_token"],
            scopes=user.get("scope", ""),
        )


def build_authorize_url(
    authorize_url: str, client_id: str, user_scopes: str, state: str, redirect_uri: str = ""
) -> str:
    """Link that starts the OAuth flow for one more Slack account."""
    params = {
        "scope": "commands",
        "user_scope": user_scopes,
        "client_id": client_id,
        "state": state,
    }
    if redirect_uri:
        params["redirect_uri"] = redirect_uri
    return f"{authorize_url}?{urlencode(params, safe=',:')}"
