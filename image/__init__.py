"""Image fusion module."""
from image.references import REFERENCE_IMAGES, fetch_reference_image, is_reference_image
from image.client import AIService, ai_service, get_ai_service
from image.services import (
    build_generation_request,
    to_gemini_parts,
    extract_first_image,
    call_gemini_generate
)

__all__ = [
    "REFERENCE_IMAGES",
    "fetch_reference_image",
    "is_reference_image",
    "AIService",
    "ai_service",
    "get_ai_service",
    "build_generation_request",
    "to_gemini_parts",
    "extract_first_image",
    "call_gemini_generate"
]
