"""
User-facing error messages and status codes.

Every failure the fusion API can report is named by an ErrorCode. Routes look
up the message and HTTP status here so the wording shown to the user stays in
one place.
"""
from typing import Tuple, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Validation Errors (400)
    NO_SUBJECT_IMAGE = "NO_SUBJECT_IMAGE"
    NO_STYLE_SIGNAL = "NO_STYLE_SIGNAL"
    INVALID_IMAGE_FILE = "INVALID_IMAGE_FILE"
    EMPTY_FILE = "EMPTY_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # Not Found Errors (404)
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    NO_RESULT_IMAGE = "NO_RESULT_IMAGE"

    # Conflict (409)
    GENERATION_IN_PROGRESS = "GENERATION_IN_PROGRESS"

    # External Service Errors (502, 503)
    GEMINI_API_ERROR = "GEMINI_API_ERROR"
    REFERENCE_FETCH_FAILED = "REFERENCE_FETCH_FAILED"
    NO_IMAGE_GENERATED = "NO_IMAGE_GENERATED"
    AI_SERVICE_UNAVAILABLE = "AI_SERVICE_UNAVAILABLE"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES = {
    ErrorCode.NO_SUBJECT_IMAGE: "Please upload an image first.",
    ErrorCode.NO_STYLE_SIGNAL: "Please either select a style image or write a prompt.",
    ErrorCode.INVALID_IMAGE_FILE: "Please select an image file.",
    ErrorCode.EMPTY_FILE: "The uploaded file is empty.",
    ErrorCode.FILE_TOO_LARGE: "The uploaded file is too large.",

    ErrorCode.SESSION_NOT_FOUND: "We couldn't find that session. Please start a new one.",
    ErrorCode.REFERENCE_NOT_FOUND: "That style image is not part of the gallery.",
    ErrorCode.NO_RESULT_IMAGE: "There is no generated image to download yet.",

    ErrorCode.GENERATION_IN_PROGRESS: "An image is already being generated. Please wait for it to finish.",

    ErrorCode.GEMINI_API_ERROR: "The AI service could not complete the request.",
    ErrorCode.REFERENCE_FETCH_FAILED: "The selected style image could not be loaded.",
    ErrorCode.NO_IMAGE_GENERATED: "No image was generated. Please try a different prompt.",
    ErrorCode.AI_SERVICE_UNAVAILABLE: "Could not initialize the AI service. Please check your API key setup.",

    ErrorCode.UNKNOWN_ERROR: "An unknown error occurred.",
}


ERROR_STATUS_CODES = {
    ErrorCode.NO_SUBJECT_IMAGE: 400,
    ErrorCode.NO_STYLE_SIGNAL: 400,
    ErrorCode.INVALID_IMAGE_FILE: 400,
    ErrorCode.EMPTY_FILE: 400,
    ErrorCode.FILE_TOO_LARGE: 400,

    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.REFERENCE_NOT_FOUND: 404,
    ErrorCode.NO_RESULT_IMAGE: 404,

    ErrorCode.GENERATION_IN_PROGRESS: 409,

    ErrorCode.GEMINI_API_ERROR: 502,
    ErrorCode.REFERENCE_FETCH_FAILED: 502,
    ErrorCode.NO_IMAGE_GENERATED: 502,
    ErrorCode.AI_SERVICE_UNAVAILABLE: 503,

    ErrorCode.UNKNOWN_ERROR: 500,
}


class FusionError(Exception):
    """An expected failure carrying its ErrorCode and an optional underlying detail."""

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        super().__init__(format_error_detail(code, detail))


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None
) -> Tuple[str, int]:
    """
    Get user-friendly error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional message that replaces the standard one

    Returns:
        Tuple of (error_message, status_code)
    """
    message = custom_message or ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)
    return message, status_code


def format_error_detail(error_code: ErrorCode, detail: Optional[str] = None) -> str:
    """Standard message for the code, followed by the underlying detail when there is one."""
    base_message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    if detail:
        return f"{base_message} ({detail})"
    return base_message
