from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
import logging
import os

_logger = logging.getLogger(__name__)

# Look for .env in api directory (parent of lexis directory)
api_dir = Path(__file__).parent.parent.parent
env_path = api_dir / ".env"

if env_path.exists():
    load_dotenv(env_path, override=True)
    _logger.info(f"Loaded .env file from: {env_path}")
else:
    # Fallback to current directory
    current_env = Path(".env")
    if current_env.exists():
        load_dotenv(current_env, override=True)
        _logger.info(f"Loaded .env file from: {current_env.absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - hosting platforms provide DATABASE_URL (uppercase)
    database_url: str = ""

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # xAI chat completions API (quiz question generation)
    xai_api_key: str = ""
    xai_api_url: str = "https://api.x.ai/v1/chat/completions"
    xai_model: str = "grok-4-1-fast-reasoning"
    ai_request_timeout: int = 60

    # Quiz sessions
    quiz_words_per_package: int = 12
    quiz_max_packages: int = 3
    quiz_max_generation_attempts: int = 2

    # Flashcard sessions (used when a user has no limits of their own)
    default_daily_review_limit: int = 50
    default_daily_new_limit: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Ensure we read DATABASE_URL from environment (hosting platforms provide it uppercase)
        if not kwargs.get("database_url"):
            kwargs["database_url"] = os.getenv("DATABASE_URL", "")
        if not kwargs.get("xai_api_key"):
            kwargs["xai_api_key"] = os.getenv("XAI_API_KEY", "")
        super().__init__(**kwargs)


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
