"""
Slack Data Models

Shapes exchanged with Slack: the slash-command caller, the OAuth grant and the
do-not-disturb state.
"""

from pydantic import BaseModel


class SlackPayload(BaseModel):
    """Caller identity and text of a slash command."""

    slack_id: str
    user_name: str = ""
    team_id: str = ""
    team_name: str = ""
    channel_id: str = ""
    channel_name: str = ""
    command: str = ""
    text: str = ""


class OAuthGrant(BaseModel):
    """Result of exchanging an authorization code with oauth.v2.access."""

    slack_id: str
    team_id: str
    team_name: str = ""
    access_token: str
    scopes: str = ""


class DndState(BaseModel):
    """Subset of dnd.info that the applier needs."""

    snooze_enabled: bool = False
