# Slack integration module
from app.integrations.slack.status_api import SlackStatusAPI, ExternalStatusAPI
from app.integrations.slack.oauth import SlackOAuthExchange, OAuthExchange
from app.integrations.slack.models import SlackPayload, OAuthGrant, DndState

__all__ = [
    "SlackStatusAPI",
    "ExternalStatusAPI",
    "SlackOAuthExchange",
    "OAuthExchange",
    "SlackPayload",
    "OAuthGrant",
    "DndState",
]
