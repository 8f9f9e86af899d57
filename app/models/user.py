"""
User and Credential Models

One internal user owns any number of linked Slack identities. Each identity
has its own OAuth access token, stored in the secret vault.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LinkedIdentity(BaseModel):
    """A Slack account (user id + team id) linked to an internal user."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    team_id: str = Field("", alias="team")


class User(BaseModel):
    """Internal user record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    slack_users: List[LinkedIdentity] = Field(default_factory=list, alias="slack-users")

    def add_linked_identity(self, slack_id: str, team_id: str) -> bool:
        """
        Link a Slack account to this user, ignoring duplicates.

        Returns:
            True if the identity was added, False if it was already linked
        """
        for identity in self.slack_users:
            if identity.id == slack_id:
                return False

        self.slack_users.append(LinkedIdentity(id=slack_id, team_id=team_id))
        return True

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes) -> "User":
        return cls.model_validate_json(data)


class AccessCredential(BaseModel):
    """OAuth user token for one Slack identity, plus the vault tags stored with it."""

    slack_id: str
    access_token: str
    user_id: str = ""
    team_id: str = ""
    scopes: str = ""

    def tags(self) -> dict:
        return {"user": self.user_id, "team": self.team_id, "scopes": self.scopes}

    def __repr__(self) -> str:
        # Never log the token
        return (
            f"AccessCredential(slack_id={self.slack_id!r}, user_id={self.user_id!r}, "
            f"team_id={self.team_id!r})"
        )

    __str__ = __repr__
