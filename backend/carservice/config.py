# backend/carservice/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/sqlite/carservice.db"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"
    events_enabled: bool = True
    frontend_url: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite paths are resolved against the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
