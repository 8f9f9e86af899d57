"""
Wiring of the trigger service from Settings.
"""

import logging
from pathlib import Path

from app.config import Settings, get_settings
from app.core.applier import ActionApplier
from app.core.fanout import FanOutCoordinator
from app.integrations.slack.oauth import SlackOAuthExchange
from app.integrations.slack.status_api import SlackStatusAPI
from app.integrations.storage import (
    FileBlobStore,
    FileSecretVault,
    MemoryBlobStore,
    MemorySecretVault,
)
from app.services.credential_store import CredentialStore
from app.services.template_store import TemplateStore
from app.services.trigger_service import TriggerService
from app.services.user_store import UserRecordStore

logger = logging.getLogger(__name__)


def build_trigger_service(settings: Settings) -> TriggerService:
    """Construct the service and all of its collaborators."""
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage, triggers and tokens will not survive a restart")
        blobs = MemoryBlobStore()
        vault = MemorySecretVault()
    elif settings.storage_backend == "file":
        data_dir = Path(settings.data_dir)
        blobs = FileBlobStore(data_dir / "blobs")
        vault = FileSecretVault(data_dir / "secrets.json")
    else:
        raise ValueError(f"Unknown storage backend {settings.storage_backend!r}")

    timeout = settings.storage_timeout_seconds
    templates = TemplateStore(blobs, timeout=timeout)
    users = UserRecordStore(blobs, timeout=timeout)
    credentials = CredentialStore(vault, timeout=timeout)

    applier = ActionApplier(
        SlackStatusAPI(timeout=settings.slack_api_timeout_seconds),
        call_timeout=settings.slack_api_timeout_seconds,
        default_snooze_minutes=settings.default_snooze_minutes,
        debug=settings.debug,
    )
    fanout = FanOutCoordinator(users, credentials, applier)
    oauth = SlackOAuthExchange(
        settings.slack_client_id,
        settings.slack_client_secret,
        redirect_uri=settings.oauth_redirect_url,
    )

    return TriggerService(templates, users, credentials, fanout, oauth, settings)


# Lazy initialization so importing the app does not touch storage
_trigger_service = None


def get_trigger_service() -> TriggerService:
    """Get the TriggerService instance with lazy initialization."""
    global _trigger_service
    if _trigger_service is None:
        _trigger_service = build_trigger_service(get_settings())
    return _trigger_service
