"""
Trigger Models

An Action is a snapshot of the presence / status / do-not-disturb state a user
wants on every linked Slack account. An ActionTemplate is a named Action that
the user stored with /create-trigger and invokes with /trigger.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from app.core.duration import duration_in_minutes


class Presence(str, Enum):
    """Slack presence values accepted by users.setPresence."""

    AWAY = "away"
    ACTIVE = "auto"


class Action(BaseModel):
    """Desired external state for one invocation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    presence: Presence
    status_text: str = Field("", alias="status-text")
    status_emoji: str = Field("", alias="status-emoji")
    dnd: bool = False
    duration: str = ""  # Token as typed, e.g. "1w"; validated at parse time

    @property
    def duration_minutes(self) -> int:
        return duration_in_minutes(self.duration)

    @property
    def applied_minutes(self) -> int:
        """Minutes used for the snooze and status expiry; duration only counts with DND."""
        if not self.dnd:
            return 0
        if self.duration:
            # Slack's shortest snooze is one minute
            return max(self.duration_minutes, 1)
        return 0


class ActionTemplate(BaseModel):
    """A named, persisted Action plus the Slack team it was created from."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    team_id: str = Field("", alias="team")
    action: Action

    def summary(self) -> str:
        """
        Render the trigger the way it would be typed to /create-trigger.

        Empty optional fields are dropped together with their punctuation:
            vacation = On a boat! (:boat:) DND for 1w
            brb = (:coffee:)
        """
        parts = [f"{self.name} ="]
        if self.action.status_text:
            parts.append(self.action.status_text)
        if self.action.status_emoji:
            parts.append(f"({self.action.status_emoji})")
        if self.action.dnd:
            parts.append("DND")
        if self.action.duration:
            parts.append(f"for {self.action.duration}")
        return " ".join(parts)

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True, exclude_defaults=True).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes) -> "ActionTemplate":
        return cls.model_validate_json(data)


CLEAR_STATUS_ACTION = Action(presence=Presence.ACTIVE)
