"""Configuration for FastAPI application."""

from pydantic_settings import BaseSettings
from pydantic import field_validator, Field
from typing import List, Union
import json


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 5173

    # API Configuration
    api_prefix: str = "/api"
    api_title: str = "statevault"
    api_version: str = "0.1.0"
    allowed_origins: Union[str, List[str]] = ["*"]

    @field_validator('allowed_origins', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            # If it's a JSON array string, parse it
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            # Single origin string
            return [v]
        return v

    # Limits
    max_body_bytes: int = Field(default=50 * 1024 * 1024, description="Maximum accepted request body size")

    # Directories
    dist_dir: str = "./dist"
    temp_dir: str = "./temp"
    backup_dir: str = "./backups"

    # Retention sweeper
    cleanup_interval_seconds: float = 3600.0
    temp_max_age_seconds: float = 3600.0

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


settings = Settings()
