"""Configuration management for storecat."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Central configuration for storecat."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    STORES_FILE = Path(
        os.path.expanduser(os.getenv("STORECAT_STORES_FILE", "~/.storecat/stores.yaml"))
    )
    LOG_LEVEL = os.getenv("STORECAT_LOG_LEVEL", "INFO")

    # WooCommerce REST API
    API_PREFIX = "/wp-json/wc/v3"
    PAGE_SIZE = int(os.getenv("STORECAT_PAGE_SIZE", "20"))
    REQUEST_TIMEOUT = float(os.getenv("STORECAT_REQUEST_TIMEOUT", "15"))
    MAX_RETRIES = int(os.getenv("STORECAT_MAX_RETRIES", "3"))

    # Fan-out limits
    MAX_CONCURRENT_REQUESTS = int(os.getenv("MAX_CONCURRENT_REQUESTS", "5"))

    # Development settings
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    @classmethod
    def get_summary(cls) -> dict[str, Any]:
        """Get configuration summary for debugging."""
        return {
            "project_root": str(cls.PROJECT_ROOT),
            "stores_file": str(cls.STORES_FILE),
            "stores_file_exists": cls.STORES_FILE.exists(),
            "log_level": cls.LOG_LEVEL,
            "api_prefix": cls.API_PREFIX,
            "page_size": cls.PAGE_SIZE,
            "request_timeout": cls.REQUEST_TIMEOUT,
            "max_retries": cls.MAX_RETRIES,
            "max_concurrent_requests": cls.MAX_CONCURRENT_REQUESTS,
            "debug": cls.DEBUG,
        }
