from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PORT: int = 5000
    DB_PATH: str = "/data/bizintake.db"
    LOG_LEVEL: str = "info"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Enrichment webhook (Make.com scenario). The same key authenticates both directions.
    ENRICHMENT_WEBHOOK_URL: str | None = None
    MAKE_WEBHOOK_API_KEY: str | None = None

    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM_ADDRESS: str | None = None

    OUTBOUND_TIMEOUT_SECONDS: float = 10.0


settings = Settings()
