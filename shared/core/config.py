import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Full URL wins over the individual parts below
    LEASING_DATABASE_URL: str | None = os.getenv("LEASING_DATABASE_URL")

    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT", "5432")
    LEASING_DB_NAME: str | None = os.getenv("LEASING_DB_NAME", "leasing")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")

    # Lease engine defaults
    DEFAULT_GRACE_PERIOD_DAYS: int = int(
        os.getenv("DEFAULT_GRACE_PERIOD_DAYS", 3))
    DEFAULT_AUTO_RENEWAL_NOTICE_DAYS: int = int(
        os.getenv("DEFAULT_AUTO_RENEWAL_NOTICE_DAYS", 5))
    STRICT_PERIOD_VALIDATION: bool = os.getenv(
        "STRICT_PERIOD_VALIDATION", "False").lower() == "true"
    BLOCK_BOOKINGS_BEHIND_AUTO_RENEWAL: bool = os.getenv(
        "BLOCK_BOOKINGS_BEHIND_AUTO_RENEWAL", "True").lower() == "true"
    DEADLINE_WINDOW_DAYS: int = int(os.getenv("DEADLINE_WINDOW_DAYS", 30))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings) -> str:
    if cfg.LEASING_DATABASE_URL:
        return cfg.LEASING_DATABASE_URL

    if cfg.DB_HOST:
        return (
            f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.LEASING_DB_NAME}?sslmode={cfg.DB_SSLMODE}"
        )

    # local development fallback
    return "sqlite:///./leasing.db"


LEASING_DATABASE_URL = build_database_url(settings)
