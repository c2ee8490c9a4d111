"""Pydantic settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class StorageConfig(BaseSettings):
    """CSV storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    csv_path: Path = Field(
        default=Path("media/waitlist.csv"),
        description="CSV file that receives waitlist rows",
    )
    lock_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for the inter-process file lock",
    )
    fsync: bool = Field(
        default=True,
        description="fsync the CSV file after every appended row",
    )
    dir_mode: int = Field(
        default=0o775,
        description="Permission bits used when creating the storage directory",
    )

    @field_validator("csv_path")
    @classmethod
    def validate_csv_path(cls, v: Path) -> Path:
        """Reject an empty path or a path that names a directory."""
        if not str(v).strip() or str(v) in (".", "/"):
            raise ValueError("STORAGE_CSV_PATH must name a file")
        return v


class CorsConfig(BaseSettings):
    """CORS headers attached to every waitlist response."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allow_origin: str = Field(default="*", description="Access-Control-Allow-Origin")
    allow_methods: str = Field(
        default="POST, OPTIONS",
        description="Access-Control-Allow-Methods",
    )
    allow_headers: str = Field(
        default="Content-Type",
        description="Access-Control-Allow-Headers",
    )

    def headers(self) -> dict[str, str]:
        """Build the CORS header mapping."""
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Headers": self.allow_headers,
        }


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )
    file: Path | None = Field(
        default=Path("logs/waitlist.log"),
        description="Log file path (None for stdout only)",
    )
    rotate_size_mb: int = Field(
        default=10,
        description="Log file rotation size in MB",
    )
    retain_count: int = Field(
        default=5,
        description="Number of rotated log files to retain",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class ServerConfig(BaseSettings):
    """Backend server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    port: int = Field(default=8080, description="Backend server port")
    host: str = Field(default="0.0.0.0", description="Backend server host")
    route_prefix: str = Field(
        default="/api/waitlist",
        description="Path the signup endpoint is mounted at",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Take the client address from X-Forwarded-For (behind a proxy)",
    )

    @field_validator("route_prefix")
    @classmethod
    def validate_route_prefix(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash."""
        v = "/" + v.strip().strip("/")
        if v == "/":
            raise ValueError("SERVER_ROUTE_PREFIX must not be the site root")
        return v


class Settings(BaseSettings):
    """Main settings class combining all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "production"] = Field(
        default="development",
        description="Environment type",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @model_validator(mode="after")
    def validate_production_safety(self) -> "Settings":
        """Enforce safety invariants for production environments."""
        if self.environment == "production" and self.logging.level == "DEBUG":
            # DEBUG logs carry raw submissions (names, emails, phone numbers)
            raise ValueError("LOG_LEVEL must not be DEBUG in production")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Settings instance
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """Save settings to YAML file.

        Args:
            path: Path to save configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json")

        with open(path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance
    """
    # Try to load from config file first
    config_path = Path("config/waitlist.yaml")
    if config_path.exists():
        return Settings.from_yaml(config_path)

    return Settings()
