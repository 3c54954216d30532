from functools import lru_cache
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# environments where OTP mail may go to the log instead of an inbox
CONSOLE_MAIL_ENVS = {"development", "test"}


class Settings(BaseSettings):
    """
    All config comes from the environment or the .env file.
    Secrets have no defaults: the app refuses to start without them.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                    # asyncpg (prod) / aiosqlite (tests)
    DATABASE_SYNC_URL: str | None = None  # psycopg2, only for Alembic
    DB_AUTO_CREATE: bool = False          # create tables on startup (dev only)

    # ── JWT ───────────────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    FACULTY_TOKEN_EXPIRE_MINUTES: int = 420
    STUDENT_TOKEN_EXPIRE_MINUTES: int = 420

    # ── OTP ───────────────────────────────────────────────
    OTP_EXPIRE_MINUTES: int = 10

    # ── Mail ──────────────────────────────────────────────
    MAIL_BACKEND: str = "console"         # "brevo" | "console"
    BREVO_API_KEY: str | None = None
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_FROM: str = "no-reply@school-records.local"
    EMAIL_FROM_NAME: str = "School Records"
    MAIL_TIMEOUT_SECONDS: float = 20.0

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def origins_list(self) -> list[str]:
        """Splits comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @model_validator(mode="after")
    def _check_mail_backend(self) -> "Settings":
        if self.MAIL_BACKEND.lower() == "console" and self.APP_ENV.lower() not in CONSOLE_MAIL_ENVS:
            raise ValueError(
                f"MAIL_BACKEND=console is only allowed when APP_ENV is one of {sorted(CONSOLE_MAIL_ENVS)}; "
                "set MAIL_BACKEND=brevo for this environment"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Single instance used across the entire app
settings = get_settings()
