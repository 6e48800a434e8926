from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SALON_NAME: str = "Your Salon"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory", "json", "supabase"
    DATA_DIR: str = "./data"

    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    OAUTH_PROVIDER: str = "google"
    OAUTH_REDIRECT_URL: str = "http://localhost:5173/auth/callback"

    BOOKINGS_PER_PAGE: int = 10
    CUSTOMERS_PER_PAGE: int = 10

    BACKGROUND_WORKERS: int = 4
    TEARDOWN_TIMEOUT_SECONDS: float = 5.0

    FORM_SESSION_TTL_SECONDS: float = 1800.0
    MAX_FORM_SESSIONS: int = 1000

    ENFORCE_SLOT_UNIQUENESS: bool = False


settings = Settings()
