"""
API Response Models

Slash-command replies in the Slack message format. Slack renders whatever we
return in the HTTP 200 body, so errors are replies too.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class ResponseType(str, Enum):
    """Who sees the reply."""

    EPHEMERAL = "ephemeral"
    IN_CHANNEL = "in_channel"


class SlackMessageResponse(BaseModel):
    """
    Response model for every slash-command endpoint.
    """

    response_type: ResponseType = Field(
        ResponseType.EPHEMERAL, description="ephemeral replies are only shown to the caller"
    )
    text: str = Field("", description="Fallback text, also used for plain replies")
    blocks: Optional[List[Dict[str, Any]]] = Field(
        None, description="Block Kit layout blocks"
    )

    @classmethod
    def markdown(cls, *sections: str) -> "SlackMessageResponse":
        """Ephemeral reply made of mrkdwn sections separated by dividers."""
        blocks: List[Dict[str, Any]] = []
        for i, section in enumerate(sections):
            if i > 0:
                blocks.append({"type": "divider"})
            blocks.append(
                {"type": "section", "text": {"type": "mrkdwn", "text": section}}
            )
        return cls(text=sections[0] if sections else "", blocks=blocks)

    @classmethod
    def plain(cls, text: str) -> "SlackMessageResponse":
        return cls(text=text)
