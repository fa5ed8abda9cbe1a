# src/matchtv/schedule_config.py
from dotenv import load_dotenv
from datetime import timedelta
import logging
import os

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

# --- Fixed scrape settings (not read from the environment) ---
TVMATCHEN_URL = "http://www.tvmatchen.nu/"
DAYS_TO_SHOW = 3
CACHE_DURATION = timedelta(hours=10)
RETRY_BACKOFF = timedelta(minutes=5)
LEAGUES = ("Premier League", "Ligue 1", "Championship", "Allsvenskan")

# Day headings carry ids like "match-day-2023-10-21"
DAY_ID_PREFIX = "match-day-"

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'


def _env_number(name: str, default, cast=int):
    """Reads a numeric setting, falling back to the default on bad input."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


# --- Server settings (environment / .env) ---
HOST = os.getenv("MATCHTV_HOST", "0.0.0.0")
PORT = _env_number("MATCHTV_PORT", 8080)
FETCH_TIMEOUT = _env_number("MATCHTV_FETCH_TIMEOUT", 15.0, cast=float)
LOG_LEVEL = os.getenv("MATCHTV_LOG_LEVEL", "INFO").upper()
