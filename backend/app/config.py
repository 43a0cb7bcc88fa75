"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Resolve config: prefer system config (installed), fall back to repo .env (dev)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_SYSTEM_CONF = Path("/etc/vrisa/vrisa.conf")
_ENV_FILE = _SYSTEM_CONF if _SYSTEM_CONF.exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    # Database
    database_url: str = "sqlite:///vrisa_alerts.db"
    db_echo: bool = False

    # Alert engine
    dedup_window_minutes: int = Field(60, gt=0)

    # Measurement history
    history_default_days: int = Field(7, ge=1, le=365)

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _resolve_sqlite_path(self) -> "Settings":
        """Make a relative SQLite file path absolute, relative to the project root."""
        prefix = "sqlite:///"
        if self.database_url.startswith(prefix):
            p = Path(self.database_url[len(prefix):])
            if str(p) and str(p) != ":memory:" and not p.is_absolute():
                self.database_url = prefix + str(_PROJECT_ROOT / p)
        return self

    model_config = {"env_prefix": "VRISA_", "env_file": str(_ENV_FILE)}


settings = Settings()
