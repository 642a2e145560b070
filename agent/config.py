"""Agent service configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Agent settings loaded from environment variables."""

    service_name: str = "agent"
    host: str = "0.0.0.0"
    port: int = 4000

    # Market
    market_base: str = Field(
        default="http://localhost:3000",
        description="Market service base URL",
    )
    market_timeout: float = Field(
        default=30.0,
        description="Timeout for market requests in seconds",
    )

    # Public URL of this service, used in usage examples
    agent_base: str | None = None

    # Checkout identity
    buyer_name: str = "Demo Buyer"
    payment_token: str = "pm_demo"

    # Search query used when a message names no known product
    default_query: str = "sut"

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
