from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Expense Tracker"
    ENV: str = "dev"

    # apps/backend/db.sqlite3, absolute so the CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "Asia/Kolkata"
    LOG_LEVEL: str = "INFO"

    # account resolved by get_current_user until real auth exists
    DEMO_EMAIL: str = "demo@example.com"

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="EXPENSE_TRACKER_", case_sensitive=False)


settings = Settings()
