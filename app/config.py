"""Configuration management using environment variables"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./event_roster.db"
DEFAULT_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed=default"


class Settings:
    """Application settings - only what the roster service needs"""

    def __init__(self):
        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # Server configuration
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))

        # Database configuration
        if self.environment == "production":
            self.database_url = self._get_required("DATABASE_URL")
        else:
            self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        # Roster configuration
        self.default_avatar_url = os.getenv("DEFAULT_AVATAR_URL", DEFAULT_AVATAR_URL)
        self.seed_slots_on_startup = os.getenv("SEED_SLOTS_ON_STARTUP", "true").lower() == "true"

        # Upload limits (2 MiB by default)
        self.max_image_bytes = int(os.getenv("MAX_IMAGE_BYTES", str(2 * 1024 * 1024)))
        if self.max_image_bytes <= 0:
            raise ValueError(f"MAX_IMAGE_BYTES must be positive, got {self.max_image_bytes}")

        # Frontend URL (landing page / admin view)
        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")

        # CORS origins (comma-separated list)
        cors_origins_env = os.getenv("CORS_ORIGINS", "")
        if cors_origins_env:
            self.cors_origins = cors_origins_env
        elif self.frontend_url != "http://localhost:3000":
            self.cors_origins = self.frontend_url
        else:
            self.cors_origins = ""

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def _get_required(self, key: str) -> str:
        """Get required environment variable or raise error."""
        value = os.getenv(key, "").strip()
        if not value:
            raise ValueError(
                f"Missing required environment variable: {key}. "
                f"Required in production mode."
            )
        return value


# Global settings instance
settings = Settings()
