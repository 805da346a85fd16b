"""Application configuration.

Loads settings from environment variables (prefixed with CATALOG_) with
sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Catalog manager settings."""

    api_base_url: str = Field(
        default="http://localhost:8000/api/produtos",
        description="Base URL of the products resource",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)",
    )

    model_config = {
        "env_prefix": "CATALOG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
