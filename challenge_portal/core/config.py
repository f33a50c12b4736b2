"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A ``Settings`` instance is built once by the application factory and handed
to every component that needs it.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase (service role key: the API writes to both tables)
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # GitHub release source
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_REPO_OWNER: str = "composio"
    GITHUB_REPO_NAME: str = "sdk-design-question"
    GITHUB_TOKEN: str = ""
    GITHUB_WEBHOOK_SECRET: str = ""
    RELEASE_ASSET_MARKER: str = "sdk-challenge"

    # Invitation email (Resend)
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "Composio Challenge <challenge@composio.dev>"
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"
