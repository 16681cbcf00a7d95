"""Configuration from environment (no hardcoded secrets)."""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings from env."""

    model_config = SettingsConfigDict(env_prefix="FILES_MANAGER_", extra="ignore")

    # Blob area for file and image payloads
    folder_path: Path = Path("/tmp/files_manager")
    db_path: Path = Path("/data/files_manager.db")

    # Sessions: auth_<token> keys live this long
    session_ttl_seconds: int = 86400

    # GET /files page size
    page_size: int = 20

    # Bootstrap user created on startup when both are set
    admin_email: str = ""
    admin_initial_password: str = ""

    # CORS: comma-separated string so pydantic-settings does not JSON-decode it
    cors_origins: str = "http://localhost:5000"

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins as a list (split on comma)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or [
            "http://localhost:5000"
        ]

    rate_limit_enabled: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Logging (empty log_file = stderr only; level DEBUG|INFO|WARNING|ERROR)
    log_level: str = "INFO"
    log_file: str = ""


def get_settings() -> Settings:
    """Return application settings."""
    return Settings()
