"""Market service configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Market settings loaded from environment variables."""

    service_name: str = "market"
    host: str = "0.0.0.0"
    port: int = 3000

    # Every cart and order in the mock is priced in a single currency
    currency: str = "TRY"

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
