"""Configuration management for hosting-tools."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger()


class HostingApiConfig(BaseModel):
    """Hosting REST API configuration."""

    origin: str = Field(
        default="https://firebasehosting.googleapis.com",
        description="Hosting API origin"
    )
    api_version: str = Field(default="v1beta1", description="Hosting API version")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    page_size: int = Field(default=10, description="Page size for list calls")
    access_token: str | None = Field(
        default=None,
        description="OAuth2 access token sent as a bearer credential"
    )

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Validate and normalize origin."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Origin must be an http(s) URL: {v}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Validate page size value."""
        if v <= 0:
            raise ValueError("Page size must be positive")
        return v


class IdentityApiConfig(BaseModel):
    """Identity toolkit API configuration (authorized domains)."""

    origin: str = Field(
        default="https://identitytoolkit.googleapis.com",
        description="Identity toolkit API origin"
    )
    api_version: str = Field(default="admin/v2", description="Identity toolkit API version")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Validate and normalize origin."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Origin must be an http(s) URL: {v}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class PollerConfig(BaseModel):
    """Long-running operation polling configuration."""

    interval: float = Field(default=1.0, description="Initial delay between polls in seconds")
    backoff_factor: float = Field(default=1.5, description="Delay multiplier per poll")
    max_backoff: float = Field(default=10.0, description="Maximum delay between polls")
    master_timeout: float = Field(
        default=600.0,  # 10 minutes
        description="Overall timeout in seconds for an operation such as a version clone"
    )

    @field_validator("interval", "max_backoff")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        """Validate delay values."""
        if v < 0:
            raise ValueError("Delay must be non-negative")
        return v

    @field_validator("backoff_factor")
    @classmethod
    def validate_backoff_factor(cls, v: float) -> float:
        """Validate backoff factor."""
        if v < 1:
            raise ValueError("Backoff factor must be at least 1")
        return v

    @field_validator("master_timeout")
    @classmethod
    def validate_master_timeout(cls, v: float) -> float:
        """Validate master timeout."""
        if v <= 0:
            raise ValueError("Master timeout must be positive")
        return v


class HashCacheConfig(BaseModel):
    """Upload hash cache configuration."""

    dir_name: str = Field(
        default=".firebase",
        description="Hidden directory, relative to the project root, holding cache files"
    )

    @field_validator("dir_name")
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        """Validate cache directory name."""
        if not v or Path(v).is_absolute():
            raise ValueError("Cache directory name must be a non-empty relative path")
        return v


class AppConfig(BaseModel):
    """Application configuration."""

    hosting: HostingApiConfig = Field(default_factory=HostingApiConfig)
    identity: IdentityApiConfig = Field(default_factory=IdentityApiConfig)
    poller: PollerConfig = Field(default_factory=PollerConfig)
    hash_cache: HashCacheConfig = Field(default_factory=HashCacheConfig)

    # Output settings
    output_format: str = Field(
        default="rich",
        description="Output format (rich, json, plain)"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @classmethod
    def load(cls, config_file: Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "hosting-tools" / "config.json"

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        # Return defaults
        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        The access token is never written.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "hosting-tools" / "config.json"

        config_file.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(mode="json", exclude={"hosting": {"access_token"}})
        with open(config_file, "w") as f:
            json.dump(data, f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"rich", "json", "plain"}
        if v not in valid_formats:
            raise ValueError(f"Invalid output format: {v}. Valid formats: {valid_formats}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
