from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "gundam-kit-catalog"

    CORS_ORIGINS: str = "http://localhost:3000"

    DATABASE_URL: str
    REDIS_URL: str = ""  # empty -> in-process session cache

    # Admin access is granted to exactly one Google account.
    ADMIN_EMAIL: str = "admin@example.com"
    SESSION_JWT_SECRET: str = "change_me_session"
    SESSION_JWT_TTL_MINUTES: int = 60 * 24
    SESSION_COOKIE_NAME: str = "catalog_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_CACHE_TTL_SECONDS: int = 300
    OAUTH_STATE_COOKIE_NAME: str = "oauth_state"

    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/auth/callback"
    GOOGLE_AUTH_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_USERINFO_URL: str = "https://openidconnect.googleapis.com/v1/userinfo"
    GOOGLE_HTTP_TIMEOUT_SECONDS: float = 10.0

    KITS_DEFAULT_PAGE_SIZE: int = 20
    KITS_MAX_PAGE_SIZE: int = 100
    ADMIN_PAGE_SIZE: int = 40
    ADMIN_MAX_PAGE_SIZE: int = 200
    RELATED_SAME_SUIT_LIMIT: int = 10
    PUBLIC_CACHE_MAX_AGE_SECONDS: int = 60

    # List browsing client
    SEARCH_DEBOUNCE_MS: int = 300
    CLIENT_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Compose/infra vars that may exist in shared .env
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "gundam"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def admin_email_normalized(self) -> str:
        return self.ADMIN_EMAIL.strip().lower()

settings = Settings()
