"""
Data models and schemas for the screenshot-to-code pipeline.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


ALLOWED_MEDIA_TYPES = ("image/png", "image/jpeg", "image/jpg", "image/webp")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB

# Suffixes accepted by the file pickers (CLI and Streamlit)
MEDIA_TYPES_BY_SUFFIX = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class DisplayTab(str, Enum):
    """Result views offered by the client."""
    PREVIEW = "preview"
    CODE = "code"


class ImageUpload(BaseModel):
    """An uploaded screenshot held in memory."""
    filename: str = "upload.png"
    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        """Size of the upload in bytes."""
        return len(self.data)

    def is_allowed_type(self) -> bool:
        return self.media_type in ALLOWED_MEDIA_TYPES

    def is_within_limit(self, max_bytes: int = MAX_UPLOAD_BYTES) -> bool:
        return self.size <= max_bytes


class ConversionRequest(BaseModel):
    """Encoded screenshot paired with the generation prompt."""
    image_base64: str
    media_type: str
    prompt: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.image_base64}"


class ConversionResult(BaseModel):
    """Generated HTML with the metadata of the call that produced it."""
    html: str
    model_name: str
    generation_timestamp: datetime = Field(default_factory=datetime.now)
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    generation_metadata: Dict[str, Any] = Field(default_factory=dict)


class ConvertResponse(BaseModel):
    """Successful response body of ``POST /api/convert``."""
    html: str


class ErrorResponse(BaseModel):
    """Error response body of every API endpoint."""
    error: str


class HealthResponse(BaseModel):
    """Response body of ``GET /api/health``."""
    status: str = "ok"
    model: str
    configured: bool
