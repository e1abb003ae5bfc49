"""Configuration Management."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VML_HOME = Path("~/.vml")


def resolve_db_path() -> str:
    """
    Locate the database file.

    Order: VML_DB_PATH, then the path stored in ~/.vml/config,
    then ~/.vml/vml.db.
    """
    env_path = os.getenv("VML_DB_PATH", "").strip()
    if env_path:
        return str(Path(env_path).expanduser())

    config_file = VML_HOME.expanduser() / "config"
    if config_file.is_file():
        configured = config_file.read_text(encoding="utf-8").strip()
        if configured:
            return str(Path(configured).expanduser())

    return str(VML_HOME.expanduser() / "vml.db")


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="VML_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Storage
    db_path: str = Field(default_factory=resolve_db_path, description="SQLite database file")
    vml_dir: str = Field(default="./vml", description="Directory for bare form names")
    designer_source: str = Field(
        default="designer.vml", description="Document excluded from canvas reloads"
    )
    reserved_prefix: str = Field(
        default="_", min_length=1, description="Flat-record rows kept across design sessions"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Remote control
    api_enabled: bool = Field(default=False, description="Start the HTTP control channel")
    api_host: str = Field(default="127.0.0.1", description="HTTP control channel bind address")
    api_port: int = Field(default=8889, gt=0, lt=65536, description="HTTP control channel port")
    api_key: str = Field(default="dev-key", description="Value expected in X-API-Key")
    shell_timeout: float = Field(default=60.0, gt=0, description="Shell command timeout (seconds)")

    # Scripting
    script_workers: int = Field(default=4, gt=0, description="Script thread pool size")

    # Designer
    grid_snap: bool = Field(default=True, description="Snap drags to the grid")
    grid_size: int = Field(default=10, gt=0, description="Grid size in pixels")

    @field_validator("db_path", "vml_dir")
    @classmethod
    def expand_home(cls, v: str) -> str:
        """Expand a leading ~ in configured paths."""
        return str(Path(v).expanduser())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
