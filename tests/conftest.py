"""
Shared test fixtures: in-memory stores and a recording fake of the Slack status API.
"""

import hashlib
import hmac
import sys
import time
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from typing import Dict, List, Optional, Set, Tuple

import pytest

from app.config import Settings
from app.core.applier import ActionApplier
from app.core.fanout import FanOutCoordinator
from app.integrations.slack.models import DndState, OAuthGrant, SlackPayload
from app.integrations.storage import MemoryBlobStore, MemorySecretVault
from app.models.trigger import Presence
from app.models.user import AccessCredential
from app.services.credential_store import CredentialStore
from app.services.template_store import TemplateStore
from app.services.trigger_service import TriggerService
from app.services.user_store import UserRecordStore


class FakeStatusAPI:
    """Records every call; fails the (slack_id, operation) pairs listed in `fail`."""

    def __init__(self):
        self.calls: List[Tuple[str, str, tuple]] = []
        self.fail: Set[Tuple[str, str]] = set()
        self.snoozed: Dict[str, bool] = {}

    def _record(self, credential: AccessCredential, method: str, *args):
        self.calls.append((credential.slack_id, method, args))
        if (credential.slack_id, method) in self.fail:
            raise RuntimeError(f"{method} failed for {credential.slack_id}")

    def calls_for(self, slack_id: str, method: Optional[str] = None) -> List[tuple]:
        return [
            args
            for sid, m, args in self.calls
            if sid == slack_id and (method is None or m == method)
        ]

    async def set_presence(self, credential, presence: Presence) -> None:
        self._record(credential, "set_presence", presence)

    async def set_custom_status(self, credential, text, emoji, duration_minutes) -> None:
        self._record(credential, "set_custom_status", text, emoji, duration_minutes)

    async def get_dnd_state(self, credential) -> DndState:
        self._record(credential, "get_dnd_state")
        return DndState(snooze_enabled=self.snoozed.get(credential.slack_id, False))

    async def start_snooze(self, credential, minutes: int) -> None:
        self._record(credential, "start_snooze", minutes)
        self.snoozed[credential.slack_id] = True

    async def end_snooze(self, credential) -> None:
        self._record(credential, "end_snooze")
        self.snoozed[credential.slack_id] = False


class FakeOAuth:
    """OAuthExchange that hands out grants registered by code."""

    def __init__(self):
        self.grants: Dict[str, OAuthGrant] = {}

    def register(self, code: str, slack_id: str, team_id: str, token: str = "xoxp-test"):
        self.grants[code] = OAuthGrant(
            slack_id=slack_id,
            team_id=team_id,
            team_name=f"team-{team_id}",
            access_token=token,
            scopes="dnd:read,dnd:write,users:write,users.profile:write",
        )

    async def exchange(self, code: str) -> OAuthGrant:
        return self.grants[code]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        slack_signing_secret="test-signing-secret",
        slack_client_id="123.456",
        slack_client_secret="shh",
        session_key="test-session-key",
        storage_backend="memory",
        quickstart_url="https://example.com/quickstart",
    )


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def vault() -> MemorySecretVault:
    return MemorySecretVault()


@pytest.fixture
def templates(blobs) -> TemplateStore:
    return TemplateStore(blobs, timeout=1)


@pytest.fixture
def users(blobs) -> UserRecordStore:
    return UserRecordStore(blobs, timeout=1)


@pytest.fixture
def credentials(vault) -> CredentialStore:
    return CredentialStore(vault, timeout=1)


@pytest.fixture
def status_api() -> FakeStatusAPI:
    return FakeStatusAPI()


@pytest.fixture
def oauth() -> FakeOAuth:
    return FakeOAuth()


@pytest.fixture
def applier(status_api) -> ActionApplier:
    return ActionApplier(status_api, call_timeout=1, default_snooze_minutes=60)


@pytest.fixture
def fanout(users, credentials, applier) -> FanOutCoordinator:
    return FanOutCoordinator(users, credentials, applier)


@pytest.fixture
def service(templates, users, credentials, fanout, oauth, settings) -> TriggerService:
    return TriggerService(templates, users, credentials, fanout, oauth, settings)


@pytest.fixture
def link(users, credentials):
    """Link a Slack account to an internal user, as a completed OAuth flow would."""

    async def _link(user_id: str, slack_id: str, team_id: str) -> None:
        await credentials.set(
            AccessCredential(
                slack_id=slack_id,
                access_token=f"xoxp-{slack_id}",
                user_id=user_id,
                team_id=team_id,
            )
        )
        user = await users.get(user_id)
        user.add_linked_identity(slack_id, team_id)
        await users.put(user)

    return _link


def make_payload(slack_id: str = "U1", team_id: str = "T1", text: str = "") -> SlackPayload:
    return SlackPayload(
        slack_id=slack_id,
        user_name="carolyn",
        team_id=team_id,
        team_name="overload",
        text=text,
    )


def slack_headers(body: bytes, secret: str = "test-signing-secret", timestamp: Optional[str] = None) -> Dict[str, str]:
    """Headers Slack would send with a request signed by the given secret."""
    if timestamp is None:
        timestamp = str(int(time.time()))
    basestring = f"v0:{timestamp}:{body.decode()}".encode()
    signature = "v0=" + hmac.new(secret.encode(), basestring, hashlib.sha256).hexdigest()
    return {
        "X-Slack-Signature": signature,
        "X-Slack-Request-Timestamp": timestamp,
        "Content-Type": "application/x-www-form-urlencoded",
    }
