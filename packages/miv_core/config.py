from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from packages.miv_core.errors import ConfigurationError


class MIVConfig(BaseSettings):
    """
    Application wide settings.
    Values are loaded from environment variables and the .env file.
    """
    PROJECT_NAME: str = "MIV Mock Interview"
    VERSION: str = "0.1.0"

    # Generative AI (Gemini). Without a key the mock provider is used.
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Interview shape
    TOTAL_QUESTIONS: int = 6
    MAX_OPEN_SESSIONS: int = 200
    SCORING_FALLBACK_SCORE: int = 70

    # Storage
    SESSION_STORE_DIR: str = "data/sessions"
    RECORD_DIR: str = "data/interviews"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # ignore undeclared environment variables
    )

    @classmethod
    def load(cls) -> "MIVConfig":
        """
        Load settings and wrap any failure in ConfigurationError.
        """
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e
