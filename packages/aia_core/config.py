from pydantic_settings import BaseSettings, SettingsConfigDict
from packages.aia_core.errors import ConfigurationError

class AIAConfig(BaseSettings):
    """
    Application-wide settings.
    Loaded from environment variables and an optional .env file.
    """
    PROJECT_NAME: str = "AI Interview Assistant"
    VERSION: str = "0.1.0"

    # Local durable store (single key -> single JSON file)
    DATA_DIR: str = "data"
    PERSIST_KEY: str = "ai-interview-assistant-data"

    # Countdown tick period in seconds
    TIMER_TICK_SECONDS: float = 1.0

    # Simulated latency for mock collaborators
    MOCK_LATENCY_MS: int = 0

    # Role announced in the welcome turn
    ROLE_TITLE: str = "Full Stack (React/Node)"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # ignore undeclared environment variables
    )

    @classmethod
    def load(cls) -> "AIAConfig":
        """
        Load settings, wrapping any failure in ConfigurationError.
        """
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e
