from pathlib import Path
from urllib.parse import quote

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Google AuthSub + Contacts feed settings
    GOOGLE_ACCOUNTS_URL: str = "https://www.google.com"
    GOOGLE_CONTACTS_FEED_URL: str = "http://www.google.com/m8/feeds"
    AUTHSUB_SCOPE: str = "http://www.google.com/m8/feeds/"

    # =================================================================
    # HTTP + PAGINATION SETTINGS
    # =================================================================
    HTTP_TIMEOUT: float = 30.0
    CONTACTS_MAX_PAGES: int | None = None  # None = follow "next" links until absent

    # Sample AuthSub web flow
    SAMPLE_APP_BASE_URL: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def authsub_request_url(self) -> str:
        return f"{self.GOOGLE_ACCOUNTS_URL.rstrip('/')}/accounts/AuthSubRequest"

    def authsub_session_token_url(self) -> str:
        return f"{self.GOOGLE_ACCOUNTS_URL.rstrip('/')}/accounts/AuthSubSessionToken"

    def authsub_revoke_token_url(self) -> str:
        return f"{self.GOOGLE_ACCOUNTS_URL.rstrip('/')}/accounts/AuthSubRevokeToken"

    def contacts_feed_url(self, account: str) -> str:
        """
        First page of the contact feed for account, e.g.
        eric@example.com -> http://www.google.com/m8/feeds/contacts/eric%40example.com/full
        """
        base = self.GOOGLE_CONTACTS_FEED_URL.rstrip("/")
        return f"{base}/contacts/{quote(account, safe='')}/full"

    def sample_return_url(self, email: str) -> str:
        """Get the sample flow's return URL for the AuthSub redirect."""
        base = self.SAMPLE_APP_BASE_URL.rstrip("/")
        return f"{base}/return?email={quote(email, safe='@')}"


settings = Settings()
