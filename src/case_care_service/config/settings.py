"""Service configuration settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "case-care-service"
    environment: str = "development"
    port: int = 8004

    # Storage configuration: "inmemory" or "sql"
    case_storage_type: str = "inmemory"
    database_url: str = "sqlite+aiosqlite:///./case_care.db"

    # Generative model service
    gemini_api_key: str = ""
    gemini_base_url: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    # Analysis and upload limits
    max_upload_bytes: int = 10 * 1024 * 1024
    max_concurrent_analyses: int = 4
    poll_interval_seconds: int = 5

    # Create a demonstration case on startup when the store is empty
    seed_demo_case: bool = False

    # CORS configuration
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def uses_sql_storage(self) -> bool:
        return self.case_storage_type.lower() == "sql"


# Global settings instance
settings = Settings()
