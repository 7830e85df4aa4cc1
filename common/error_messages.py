"""
Client-facing error messages and status codes.

Every failure of the try-hairstyle endpoint maps to one ErrorCode, which in
turn fixes the HTTP status and the text returned in the JSON `error` field.
"""
from typing import Optional, Tuple
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for the try-hairstyle endpoint."""

    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    MISSING_API_KEY = "MISSING_API_KEY"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES = {
    ErrorCode.METHOD_NOT_ALLOWED: "Method Not Allowed. Use POST.",
    ErrorCode.MISSING_API_KEY: "Server configuration error: GEMINI_API_KEY not set.",
    ErrorCode.MISSING_FIELD: "Missing required fields: image_data or prompt.",
    ErrorCode.INVALID_IMAGE_DATA: "Invalid image_data: not valid base64.",
    ErrorCode.IMAGE_GENERATION_FAILED: "AI failed to return an image. Try a different prompt.",
    ErrorCode.UNKNOWN_ERROR: "Internal Server Error:",
}


ERROR_STATUS_CODES = {
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.MISSING_API_KEY: 500,
    ErrorCode.MISSING_FIELD: 400,
    ErrorCode.INVALID_IMAGE_DATA: 400,
    ErrorCode.IMAGE_GENERATION_FAILED: 500,
    ErrorCode.UNKNOWN_ERROR: 500,
}


class HairstyleError(Exception):
    """
    A request failure with a known client-facing outcome.

    `detail` is technical context for the logs and is never sent to the client.
    """

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        super().__init__(detail or ERROR_MESSAGES[code])


class GenerationFailedError(HairstyleError):
    """The upstream model answered but no usable image could be extracted."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(ErrorCode.IMAGE_GENERATION_FAILED, detail)


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None
) -> Tuple[str, int]:
    """
    Get the client-facing error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional text appended to the standard message

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    if custom_message:
        message = f"{message} {custom_message}"

    return message, status_code


def internal_error_response(exc: BaseException) -> Tuple[str, int]:
    """Message and status for an unexpected exception, embedding only its message text."""
    return get_error_response(ErrorCode.UNKNOWN_ERROR, str(exc) or exc.__class__.__name__)
