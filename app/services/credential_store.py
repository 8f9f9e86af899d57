"""
Credential store for per-identity Slack OAuth tokens.

Each linked Slack account has one user token in the secret vault, keyed by
"oauth-{slack_id}" and tagged with the owning internal user id, the Slack team
and the granted scopes. Tokens are overwritten on every successful OAuth
exchange; expiry is governed by Slack.
"""

import logging

from app.core.errors import SecretNotFoundError, UnauthorizedIdentityError
from app.integrations.storage.vault import SecretVault
from app.models.user import AccessCredential
from app.utils.helpers import run_blocking

logger = logging.getLogger(__name__)


def credential_key(slack_id: str) -> str:
    return f"oauth-{slack_id}"


class CredentialStore:
    """Reads and writes AccessCredentials in the secret vault."""

    def __init__(self, vault: SecretVault, timeout: float = 3.0):
        self.vault = vault
        self.timeout = timeout

    async def get(self, slack_id: str) -> AccessCredential:
        """
        Load the credential for a Slack identity.

        Raises:
            UnauthorizedIdentityError: If the identity never completed the OAuth flow
            CollaboratorTransportError: If the vault could not be reached
        """
        key = credential_key(slack_id)
        try:
            token, tags = await run_blocking(
                self.vault.get_secret,
                key,
                timeout=self.timeout,
                context=f"loading secret {key!r} from vault",
            )
        except SecretNotFoundError:
            raise UnauthorizedIdentityError(slack_id) from None

        credential = AccessCredential(
            slack_id=slack_id,
            access_token=token,
            user_id=tags.get("user", ""),
            team_id=tags.get("team", ""),
            scopes=tags.get("scopes", ""),
        )
        if not credential.user_id:
            raise UnauthorizedIdentityError(slack_id)

        return credential

    async def set(self, credential: AccessCredential) -> None:
        key = credential_key(credential.slack_id)
        await run_blocking(
            self.vault.set_secret,
            key,
            credential.access_token,
            credential.tags(),
            timeout=self.timeout,
            context=f"saving secret {key!r}",
        )
        logger.info(
            f"Saved oauth token for {credential.slack_id} on team {credential.team_id} "
            f"(user {credential.user_id})"
        )

    async def lookup_user_id(self, slack_id: str) -> str:
        """Internal user id that owns a Slack identity."""
        credential = await self.get(slack_id)
        return credential.user_id
