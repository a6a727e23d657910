"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Redis document store
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    STORE_KEY_PREFIX: str = os.getenv("STORE_KEY_PREFIX", "storefront:")

    # Spreadsheet importer pacing (write quota of the backing store)
    IMPORT_BATCH_SIZE: int = int(os.getenv("IMPORT_BATCH_SIZE", "10"))
    IMPORT_BATCH_DELAY_SECONDS: float = float(
        os.getenv("IMPORT_BATCH_DELAY_SECONDS", "1.0")
    )

    # Email intake
    DEFAULT_EMAIL_SOURCE: str = os.getenv("DEFAULT_EMAIL_SOURCE", "promo_modal")

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    def public_view(self) -> dict[str, str | int | float | bool]:
        """Non-secret settings exposed by the diagnostics endpoint."""
        return {
            "environment": self.ENVIRONMENT,
            "store_key_prefix": self.STORE_KEY_PREFIX,
            "redis_configured": bool(os.getenv("REDIS_URL")),
            "import_batch_size": self.IMPORT_BATCH_SIZE,
            "import_batch_delay_seconds": self.IMPORT_BATCH_DELAY_SECONDS,
            "default_email_source": self.DEFAULT_EMAIL_SOURCE,
            "debug": self.debug,
            "log_level": self.log_level,
        }

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, debug={self.debug}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
