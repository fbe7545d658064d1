"""Configuration management."""
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_timeout(value: Optional[str]) -> Optional[float]:
    """Blank or zero means wait indefinitely."""
    if not value:
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None


class Config:
    """Application configuration."""
    
    # Book API
    API_BASE_URL = os.getenv("BOOKLOG_API_URL", "http://localhost:8080")
    REQUEST_TIMEOUT = _optional_timeout(os.getenv("BOOKLOG_REQUEST_TIMEOUT"))
    
    # Web front end
    HOST = os.getenv("BOOKLOG_HOST", "127.0.0.1")
    PORT = int(os.getenv("BOOKLOG_PORT", "5000"))
    DEBUG = os.getenv("BOOKLOG_DEBUG", "").lower() in ("1", "true", "yes")
    THEME_COOKIE_MAX_AGE = int(os.getenv("BOOKLOG_THEME_COOKIE_MAX_AGE", str(365 * 24 * 3600)))
    
    # Logging
    LOG_LEVEL = os.getenv("BOOKLOG_LOG_LEVEL", "INFO").upper()
