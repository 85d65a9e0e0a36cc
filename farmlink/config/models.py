"""
Pydantic-based configuration models for the FarmLink server.

Each group reads its own environment prefix; AppConfig aggregates them and
also reads a .env file.
"""

import json
import os
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


def _parse_env_list(candidate: Any) -> list[str]:
    """Parse a string from the environment as JSON list or CSV."""
    if candidate is None:
        return []
    s = str(candidate).strip()
    if not s:
        return []
    try:
        loaded = json.loads(s)
        if isinstance(loaded, list):
            return [str(item).strip() for item in loaded if str(item).strip()]
    except json.JSONDecodeError:
        pass
    return [item.strip() for item in s.split(",") if item.strip()]


def _default_cors_origins() -> list[str]:
    """Derive default CORS origins with environment taking precedence."""
    parsed = _parse_env_list(os.getenv("ALLOWED_ORIGINS"))
    if parsed:
        return parsed
    return ["http://localhost:5173", "http://127.0.0.1:5173"]


class ServerConfig(BaseSettings):
    """Server network configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=5000, description="Server port")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1024 <= v <= 65535:
            logger.error("Invalid server port", port=v, valid_range="1024-65535")
            raise ValueError("Port must be between 1024 and 65535")
        return v

    model_config = {"env_prefix": "SERVER_", "case_sensitive": False, "extra": "ignore"}


class DatabaseConfig(BaseSettings):
    """Call directory database configuration."""

    url: str = Field(default="sqlite+aiosqlite:///:memory:", description="Async SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Echo SQL statements")
    seed_demo_data: bool = Field(default=True, description="Seed demo users, availability and calls on startup")

    @field_validator("url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Only async drivers are supported."""
        if not v:
            raise ValueError("Database URL cannot be empty")
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if not v.startswith(("sqlite+aiosqlite", "postgresql+asyncpg")):
            logger.error("Unsupported database URL", url_preview=v[:50])
            raise ValueError("Database URL must use sqlite+aiosqlite or postgresql+asyncpg")
        return v

    model_config = {"env_prefix": "DATABASE_", "case_sensitive": False, "extra": "ignore"}


class SignalingConfig(BaseSettings):
    """Signaling relay transport configuration."""

    path: str = Field(default="/ws", description="WebSocket path of the signaling endpoint")
    max_message_size: int = Field(default=64 * 1024, description="Maximum inbound frame size in bytes")
    outbound_queue_size: int = Field(default=256, description="Pending outbound messages per connection")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """The endpoint path must be absolute."""
        if not v.startswith("/"):
            raise ValueError("Signaling path must start with '/'")
        return v

    @field_validator("max_message_size", "outbound_queue_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Limits must be positive."""
        if v < 1:
            raise ValueError("Signaling limits must be at least 1")
        return v

    model_config = {"env_prefix": "SIGNALING_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="human", description="Log format")
    log_base: str = Field(default="logs", description="Base log directory")
    rotation_max_size: str = Field(default="100MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, description="Number of backup log files")
    disable_logging: bool = Field(default=False, description="Disable all logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "e2e_test", "production"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to the dict format consumed by setup_enhanced_logging."""
        return {
            "environment": self.environment,
            "level": self.level,
            "format": self.format,
            "log_base": self.log_base,
            "rotation_max_size": self.rotation_max_size,
            "rotation_backup_count": self.rotation_backup_count,
            "disable_logging": self.disable_logging,
        }


class CORSConfig(BaseSettings):
    """CORS configuration for the browser clients."""

    allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=_default_cors_origins)
    allow_credentials: bool = Field(default=True)
    allow_methods: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["GET", "POST", "PATCH", "OPTIONS"])
    allow_headers: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["Content-Type", "Authorization", "X-Correlation-ID"]
    )
    max_age: int = Field(default=600)

    @field_validator("allow_origins", "allow_methods", "allow_headers", mode="before")
    @classmethod
    def parse_list(cls, v: Any) -> Any:
        """Accept JSON lists or comma separated values from the environment."""
        if isinstance(v, str):
            return _parse_env_list(v)
        return v

    model_config = {"env_prefix": "CORS_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Aggregates all other configs. Access via get_config().
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    signaling: SignalingConfig = Field(default_factory=SignalingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cors: CORSConfig = Field(default_factory=CORSConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to a plain dict, used for logging setup."""
        return {
            "host": self.server.host,
            "port": self.server.port,
            "database_url": self.database.url,
            "signaling": {
                "path": self.signaling.path,
                "max_message_size": self.signaling.max_message_size,
                "outbound_queue_size": self.signaling.outbound_queue_size,
            },
            "logging": self.logging.to_legacy_dict(),
            "cors": {
                "allow_origins": self.cors.allow_origins,
                "allow_credentials": self.cors.allow_credentials,
                "allow_methods": self.cors.allow_methods,
                "allow_headers": self.cors.allow_headers,
                "max_age": self.cors.max_age,
            },
        }
