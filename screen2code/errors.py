"""
Exception hierarchy for the conversion service.

Each error carries the HTTP status the API responds with, so the request
handler can turn any of them into an ``{"error": ...}`` payload.
"""


class Screen2CodeError(Exception):
    """Base class for all conversion errors."""

    status_code: int = 500
    default_message: str = "Failed to convert image"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingImageError(Screen2CodeError):
    """No file was attached to the request."""

    status_code = 400
    default_message = "No image uploaded"


class UnsupportedMediaTypeError(Screen2CodeError):
    """The upload's media type is not in the allow-list."""

    status_code = 400
    default_message = "Only PNG, JPEG, and WebP images are allowed"


def format_size(num_bytes: int) -> str:
    """Human-readable size for limit messages, e.g. ``5 MB`` or ``16 bytes``."""
    if num_bytes >= 1024 * 1024 and num_bytes % (1024 * 1024) == 0:
        return f"{num_bytes // (1024 * 1024)} MB"
    if num_bytes >= 1024 and num_bytes % 1024 == 0:
        return f"{num_bytes // 1024} KB"
    return f"{num_bytes} bytes"


class UploadTooLargeError(Screen2CodeError):
    """The upload exceeds the size limit."""

    status_code = 413
    default_message = "Image exceeds the 5 MB upload limit"

    @classmethod
    def for_limit(cls, max_bytes: int) -> "UploadTooLargeError":
        return cls(f"Image exceeds the {format_size(max_bytes)} upload limit")


class MissingCredentialError(Screen2CodeError):
    """No Gemini API key is configured."""

    status_code = 500
    default_message = "Gemini API key not configured. Add GEMINI_API_KEY to your .env file."


class GenerationError(Screen2CodeError):
    """The generation API call failed."""

    status_code = 500
