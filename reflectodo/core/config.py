"""Configuration management for reflectodo."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Persistence Configuration
    storage_backend: Literal["local", "remote"] = Field(
        default="local", description="Where the task collection is persisted (local key-value store or PocketBase)"
    )
    local_store_path: str = Field(
        default="data/reflectodo.sqlite3", description="SQLite file backing the local key-value store"
    )
    local_store_key: str = Field(default="todos", description="Key under which the task list is stored locally")

    # PocketBase Configuration
    pocketbase_url: str = Field(default="http://127.0.0.1:8090", description="PocketBase server URL")
    pocketbase_admin_email: str | None = Field(default=None, description="PocketBase admin email for schema sync")
    pocketbase_admin_password: str | None = Field(
        default=None, description="PocketBase admin password for schema sync"
    )
    tasks_collection: str = Field(default="todos", description="Name of the remote tasks table")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Server Configuration
    host: str = Field(default="127.0.0.1", description="Interface the HTTP server binds to")
    port: int = Field(default=8000, description="Port the HTTP server listens on")

    # Views
    timezone: str = Field(default="UTC", description="IANA zone used to truncate timestamps to calendar days")
    default_time_range: Literal["7d", "30d", "90d", "all"] = Field(
        default="30d", description="Dashboard time range used when the request does not specify one"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_NOT_FOUND: int = 404

    # Relative date labels
    SOON_WINDOW_DAYS: int = 7  # Beyond this, due dates render as "Oct 25"

    # Overdue styling
    OVERDUE_INTENSITY_CAP_DAYS: int = 30
    OVERDUE_MAX_SCALE_BOOST: float = 0.15
    OVERDUE_MAX_GLOW_PX: float = 20.0
    OVERDUE_BASE_OPACITY: float = 0.3

    # Dashboard
    TREND_DAYS: int = 30
    TIME_RANGE_DAYS: dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}  # noqa: RUF012
    ALL_RANGE_ACTIVITY_WINDOW_DAYS: int = 90  # "all" has no cutoff but activity still looks back 90 days
    COMPLETION_WEIGHT: float = 0.4
    ON_TIME_WEIGHT: float = 0.3
    ACTIVITY_WEIGHT: float = 0.3

    # Sorting
    PRIORITY_RANK: dict[str, int] = {"high": 0, "medium": 1, "low": 2}  # noqa: RUF012

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
