# File: pmtool/core/config.py
"""
Configuration settings for PMTool.

This module defines application settings using Pydantic's BaseSettings,
which supports environment variable loading and validation.
"""

import json
import secrets
from typing import Any, Dict, List, Optional, Union

from pydantic import AnyHttpUrl, validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class uses Pydantic's BaseSettings to load configuration from
    environment variables, with validation and type conversion.
    """

    # API settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "PMTool"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    PRODUCTION: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    JWT_ALGORITHM: str = "HS256"
    MIN_PASSWORD_LENGTH: int = 6

    # CORS
    BACKEND_CORS_ORIGINS: List[Union[AnyHttpUrl, str]] = []

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS origins from environment variables."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                return [i.strip() for i in v.split(",") if i.strip()]
        return v or []

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        return v.upper() if v.upper() in valid_levels else "INFO"

    # Database
    DATABASE_PATH: str = "pmtool.db"
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: Optional[str] = None
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    @validator("DATABASE_URL", pre=True, always=True)
    def assemble_db_connection(cls, v: Optional[str], values: Dict[str, Any]) -> Any:
        """Assemble database connection string."""
        if isinstance(v, str) and v:
            return v
        if (
                values.get("DATABASE_HOST")
                and values.get("DATABASE_PORT")
                and values.get("DATABASE_USER")
                and values.get("DATABASE_NAME")
        ):
            password = values.get("DATABASE_PASSWORD") or ""
            return f"postgresql://{values['DATABASE_USER']}:{password}@{values['DATABASE_HOST']}:{values['DATABASE_PORT']}/{values['DATABASE_NAME']}"
        return f"sqlite:///{values.get('DATABASE_PATH', 'pmtool.db')}"

    # Cache
    CACHE_TTL_SECONDS: int = 300  # 5 minutes
    CACHE_MAX_SIZE: int = 1000

    @validator("CACHE_TTL_SECONDS")
    def validate_cache_ttl(cls, v: int) -> int:
        """Validate cache TTL is non-negative."""
        return max(0, v)  # 0 disables caching

    # Dependency graph
    # Scan the whole task_dependencies table when ordering a project instead
    # of only the edges touching the project's tasks.
    TOPO_SORT_GLOBAL_EDGE_SCAN: bool = False

    class Config:
        """Pydantic settings configuration."""

        case_sensitive = True
        env_file = ".env"


# Create settings instance
settings = Settings()
