"""Gemini client lifecycle.

The client is built once when the application starts. If that fails the
service stays unavailable for the life of the process, and every session
reports its generate and prompt controls as disabled.
"""
from typing import Any, Callable, Optional

from google import genai

from config import Config
from common.error_messages import ErrorCode, ERROR_MESSAGES
from utils.logger import get_logger

logger = get_logger("image.client")


def _default_client_factory() -> Any:
    return genai.Client(api_key=Config.get_gemini_api_key())


class AIService:
    """Holds the Gemini client, or the reason it could not be created."""

    def __init__(self):
        self.client: Optional[Any] = None
        self.init_error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.client is not None and self.init_error is None

    @property
    def setup_error_message(self) -> Optional[str]:
        if self.ready:
            return None
        return ERROR_MESSAGES[ErrorCode.AI_SERVICE_UNAVAILABLE]

    def initialize(self, client_factory: Optional[Callable[[], Any]] = None) -> bool:
        """Construct the client. Returns False (and keeps the error) when construction fails."""
        factory = client_factory or _default_client_factory
        try:
            self.client = factory()
            self.init_error = None
            logger.info(f"Gemini client initialized (model: {Config.GEMINI_MODEL})")
            return True
        except Exception as e:
            self.client = None
            self.init_error = str(e) or e.__class__.__name__
            logger.error(f"Failed to initialize Gemini client: {self.init_error}")
            return False


ai_service = AIService()


def get_ai_service() -> AIService:
    """FastAPI dependency returning the process-wide AI service."""
    return ai_service
