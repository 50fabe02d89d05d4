import os
import logging
from typing import Optional

from src.utils.majestic.errors import ConfigError

API_KEY_ENV = "MAJESTIC_API_KEY"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure root logging from LOG_LEVEL (default INFO)"""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # httpx logs full request URLs at INFO, and app_api_key travels in the query string
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_majestic_api_key(api_key: Optional[str] = None) -> str:
    """Resolve the Majestic API key

    An explicitly supplied key wins; otherwise the environment is read at call
    time, so hosted deployments pick up the key per request.

    Raises:
        ConfigError: if no non-empty key is available
    """
    if api_key and api_key.strip():
        return api_key.strip()

    env_key = os.environ.get(API_KEY_ENV, "").strip()
    if not env_key:
        error_str = f"Majestic API key not found. Set the {API_KEY_ENV} environment variable."
        logger.error(error_str)
        raise ConfigError(error_str)

    return env_key
