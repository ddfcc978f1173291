"""
Configuration for procedure-client.

Values are loaded from a .env file next to the project and can be
overridden by actual environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Settings for procedure clients.

    Explicit constructor arguments on ProcedureClient always take precedence
    over these values.
    """

    # Deployment environment; request tracing is off by default in production
    ENVIRONMENT: str = "development"

    # Router endpoint
    RPC_URL: str = "http://localhost:2021"

    # Default httpx transport
    RPC_TIMEOUT: float = 30.0
    RPC_MAX_CONNECTIONS: int = 100
    RPC_MAX_KEEPALIVE: int = 20

    # Request tracing; None means "decide from ENVIRONMENT"
    RPC_LOG_REQUESTS: bool | None = None

    # Subscription backoff, in seconds
    SUBSCRIPTION_BASE_DELAY: float = 1.0
    SUBSCRIPTION_MAX_DELAY: float = 30.0

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def log_requests(self) -> bool:
        """Whether clients trace procedure calls unless told otherwise."""
        if self.RPC_LOG_REQUESTS is not None:
            return self.RPC_LOG_REQUESTS
        return not self.is_production


# Global settings instance
settings = Settings()  # type: ignore
