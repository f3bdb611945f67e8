"""Configuration management for URL shortener."""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    debug: bool = Field(
        default=False,
        description="Expose unexpected error details in 500 responses"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed to call the API and open the event hub"
    )

    # URL shortener settings
    base_url: str = Field(
        default="http://localhost:9200",
        description="Base URL for generating short URLs"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short URLs (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=7,
        ge=1,
        description="Length of generated short codes"
    )

    max_collision_retries: int = Field(
        default=5,
        ge=1,
        description="Maximum attempts when generating a unique short code"
    )

    custom_code_min_length: int = Field(
        default=5,
        ge=1,
        description="Minimum length of a custom short code"
    )

    short_code_max_length: int = Field(
        default=20,
        ge=1,
        description="Maximum length of any short code"
    )

    max_url_length: int = Field(
        default=2048,
        ge=1,
        description="Maximum length of a long URL"
    )

    # Listing settings
    default_page_size: int = Field(
        default=50,
        ge=1,
        description="Page size when the limit parameter is omitted"
    )

    max_page_size: int = Field(
        default=100,
        ge=1,
        description="Upper clamp for page size and recent count"
    )

    default_recent_count: int = Field(
        default=10,
        ge=1,
        description="Number of recent URLs when count is omitted"
    )

    max_search_length: int = Field(
        default=200,
        ge=1,
        description="Longest accepted search term"
    )

    # Store settings
    store_shards: int = Field(
        default=16,
        ge=1,
        description="Number of lock stripes in the in-memory store"
    )

    event_queue_size: int = Field(
        default=1000,
        ge=1,
        description="Pending push events kept before new ones are dropped"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
