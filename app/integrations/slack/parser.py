"""
Slack Slash Command Parser

Verifies the request signature and parses the form-encoded slash command body
into a SlackPayload.

Slack sends slash commands as application/x-www-form-urlencoded with fields:
    team_id, team_domain, channel_id, channel_name, user_id, user_name,
    command, text, response_url, trigger_id
"""

from typing import Mapping
from urllib.parse import parse_qs

from slack_sdk.signature import SignatureVerifier

from app.integrations.slack.models import SlackPayload


def verify_signature(body: bytes, headers: Mapping[str, str], signing_secret: str) -> bool:
    """
    Check X-Slack-Signature / X-Slack-Request-Timestamp against the raw body.

    Returns False when no signing secret is configured.
    """
    if not signing_secret:
        return False
    verifier = SignatureVerifier(signing_secret)
    return verifier.is_valid_request(body, dict(headers.items()))


def parse_slash_command(body: bytes) -> SlackPayload:
    """
    Parse a slash command body.

    Raises:
        ValueError: If the body has no user_id
    """
    form = parse_qs(body.decode("utf-8"), keep_blank_values=True)

    def field(name: str) -> str:
        values = form.get(name)
        return values[0] if values else ""

    if not field("user_id"):
        raise ValueError("slash command payload is missing user_id")

    return SlackPayload(
        slack_id=field("user_id"),
        user_name=field("user_name"),
        team_id=field("team_id"),
        team_name=field("team_domain"),
        channel_id=field("channel_id"),
        channel_name=field("channel_name"),
        command=field("command"),
        text=field("text").strip(),
    )
