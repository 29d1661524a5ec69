"""Core configuration settings - server, logging and driver."""

from pydantic import BaseModel, Field, field_validator


# === Server Configuration ===


class ServerSettings(BaseModel):
    """Server-specific configuration settings."""

    host: str = Field(
        default="127.0.0.1",
        description="Server host address",
    )

    port: int = Field(
        default=4723,
        description="Server port number",
        ge=1,
        le=65535,
    )


# === Logging Configuration ===


class LoggingSettings(BaseModel):
    """Centralized logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    format: str = Field(
        default="console",
        description="Logging output format: 'console' for development, 'json' for production",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"console", "json"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'console' or 'json'")
        return fmt


# === Driver Configuration ===


class DriverSettings(BaseModel):
    """Settings handed to the automation driver."""

    new_command_timeout: float = Field(
        default=60.0,
        description="Seconds without a command before the session is considered idle (0 disables)",
        ge=0,
    )
