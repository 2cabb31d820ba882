"""Application configuration via environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Event Desk"
    debug: bool = False

    # Dashboard server (local only)
    host: str = "127.0.0.1"
    port: int = 3737
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Storage
    data_dir: Path = Path.home() / ".mgc-calendar"
    database_url: str = ""  # Empty means <data_dir>/events.db

    # Calendar documents
    calendar_name: str = "MGC Calendar"
    product_id: str = "-//MGC Calendar//EN"
    uid_domain: str = "mgc-calendar"

    # Logging
    log_dir: Path = Path.home() / ".logs" / "eventdesk"

    @property
    def ics_dir(self) -> Path:
        """Directory holding one .ics document per event uid."""
        return self.data_dir / "ics-files"

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'events.db'}"


settings = Settings()
