# settings.py
import logging
import os
import sys
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv(override=True)

from pydantic import BaseModel

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class Settings(BaseModel):
    API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    MODEL_NAME: str = os.getenv("MODEL_NAME", "gemini-2.5-flash")
    MAX_OUTPUT_TOKENS: Optional[int] = _optional_int("MAX_OUTPUT_TOKENS")
    TEMPERATURE: Optional[float] = _optional_float("TEMPERATURE")
    # upstream bounds, in seconds
    CHAT_TIMEOUT: float = float(os.getenv("CHAT_TIMEOUT", "60"))
    STREAM_TIMEOUT: float = float(os.getenv("STREAM_TIMEOUT", "120"))
    # request body ceiling
    MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(1 << 20)))
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

    def require_api_key(self) -> str:
        """Return the API key, or terminate the process when it is missing."""
        if not self.API_KEY:
            logger.critical("GEMINI_API_KEY not set")
            sys.exit(1)
        return self.API_KEY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
