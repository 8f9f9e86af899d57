from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "SlackOverload"
    debug: bool = False

    # Slack app
    slack_signing_secret: str = ""
    slack_client_id: str = ""
    slack_client_secret: str = ""
    slack_api_timeout_seconds: float = 10.0
    default_snooze_minutes: int = 60  # Used for DND triggers without "for <duration>"

    # OAuth linking flow
    session_key: str = ""  # Signs the OAuth state parameter
    oauth_authorize_url: str = "https://slack.com/oauth/v2/authorize"
    oauth_user_scopes: str = "dnd:read,dnd:write,users:write,users.profile:write"
    oauth_redirect_url: str = ""
    quickstart_url: str = "https://slackoverload.com/quickstart"

    # Storage (blob containers + secret vault)
    storage_backend: str = "file"  # file | memory
    data_dir: str = ".data"
    storage_timeout_seconds: float = 3.0

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
