"""
Configuration module for the Simulation Engine service
Centralizes all environment variable access and configuration settings

Only the server layer reads these settings; the simulation core never does.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables

    All settings can be overridden via environment variables.
    Default values are provided for development.
    """

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "human"
    log_file: Optional[str] = None
    log_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_backup_count: int = 5

    # Environment
    env: str = "development"  # "development" or "production"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS configuration
    allowed_origins: str = "*"  # Comma-separated list of origins

    # Request limits
    max_request_size: int = 1 * 1024 * 1024  # 1 MB

    # Request-level timeout around the server path, in seconds
    simulation_timeout: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def log_format_json(self) -> bool:
        """Check if logging should use JSON format"""
        return self.log_format.lower() == "json"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.env.lower() == "production"

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list"""
        origins = [origin.strip() for origin in self.allowed_origins.split(",")]
        if "*" in origins:
            return ["*"]
        return origins

    def __init__(self, **kwargs):
        """Initialize settings with environment variable overrides"""
        super().__init__(**kwargs)
        # Force JSON logging in production
        if self.is_production and not self.log_format_json:
            self.log_format = "json"


# Global settings instance (singleton)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton pattern)

    Returns:
        Settings instance with current configuration
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
