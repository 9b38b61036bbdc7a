"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode (also creates tables on startup).
        database_url: Database connection URL.
        counter_initial_value: Value seeded into the bundle counter when absent.
        label_cache_dir: Directory rendered label images are written to.
        label_logo_path: Logo image drawn on compact labels.
        label_renderer: Which label rendering backend to compose.
        printer_host: Host of the printer bridge.
        printer_path: Path of the printer bridge print endpoint.
        print_timeout: Timeout for a single bridge request, in seconds.
        print_max_attempts: Number of delivery attempts per print job.
        print_retry_backoff: Delay between delivery attempts, in seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "bundletrack"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Database
    database_url: str = "sqlite:///./bundletrack.db"

    # CORS (label stations and the floor UI run on other hosts)
    cors_origins: list[str] = ["*"]

    # Bundle numbering
    counter_initial_value: str = "1"

    # Labels
    label_cache_dir: str = "cache"
    label_logo_path: str = "logo.png"
    label_renderer: Literal["pillow", "disabled"] = "pillow"

    # Printer bridge
    printer_host: str = "localhost"
    printer_path: str = "/bt/printLabel"
    print_timeout: float = 10.0
    print_max_attempts: int = 3
    print_retry_backoff: float = 1.0

    @property
    def printer_url(self) -> str:
        """Full URL of the printer bridge print endpoint."""
        return f"http://{self.printer_host}{self.printer_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
