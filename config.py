"""
Configuration module - loads all settings from environment variables.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


DEFAULT_REFERENCE_IMAGES = [
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-clay.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-gold.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-mosaic.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-origami.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-pixel.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-terracotta.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-topiary.png",
    "https://storage.googleapis.com/maker-suite-media/user-prompt-images/style-transfer-wool.png",
]


class Config:
    """Application configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Safely parse float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid float for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_list(key: str, default: List[str]) -> List[str]:
        """Parse a comma-separated environment variable, ignoring blanks."""
        raw = os.getenv(key, "")
        items = [item.strip() for item in raw.split(",") if item.strip()]
        return items or list(default)

    # Gemini API
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-image-preview")

    # Fusion behaviour
    DEFAULT_STYLE_PROMPT: str = os.getenv(
        "DEFAULT_STYLE_PROMPT",
        "Apply the style of the second image to the first image."
    )
    REFERENCE_IMAGES: List[str] = _get_list.__func__("REFERENCE_IMAGE_URLS", DEFAULT_REFERENCE_IMAGES)
    REFERENCE_FETCH_TIMEOUT: float = _get_float.__func__("REFERENCE_FETCH_TIMEOUT", 30.0)
    MAX_UPLOAD_BYTES: int = _get_int.__func__("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)
    DOWNLOAD_FILENAME: str = "fused-image.png"

    # Logging
    LOG_DIR: str = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_RETENTION_DAYS: int = _get_int.__func__("LOG_RETENTION_DAYS", 10)

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 8000)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")

    @classmethod
    def get_gemini_api_key(cls) -> str:
        """Get GEMINI_API_KEY, raise error if not set."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY must be set in environment variables")
        return cls.GEMINI_API_KEY
