"""
Configuration Management
"""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


# Get project root directory (1 level up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    database_url: str = f"sqlite+aiosqlite:///{PROJECT_ROOT}/data/unit_preferences.db"
    database_echo: bool = False  # Set to True for SQL query logging

    # Application
    app_name: str = "Unit Preferences Service"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    log_dir: str = "logs"

    # CORS Origins (comma-separated string from env, converted to list)
    cors_origins: str = "http://localhost:8081,http://localhost:19006"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
