# Shared data models
from app.models.trigger import Action, ActionTemplate, Presence, CLEAR_STATUS_ACTION
from app.models.user import User, LinkedIdentity, AccessCredential
from app.models.api_responses import SlackMessageResponse, ResponseType

__all__ = [
    "Action",
    "ActionTemplate",
    "Presence",
    "CLEAR_STATUS_ACTION",
    "User",
    "LinkedIdentity",
    "AccessCredential",
    "SlackMessageResponse",
    "ResponseType",
]
