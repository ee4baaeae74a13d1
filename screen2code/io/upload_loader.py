"""
Utilities for loading and validating uploaded screenshots.
"""

import base64
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image

from screen2code.errors import UnsupportedMediaTypeError, UploadTooLargeError
from screen2code.models import (
    MAX_UPLOAD_BYTES,
    MEDIA_TYPES_BY_SUFFIX,
    ConversionRequest,
    ImageUpload,
)


class UploadLoader:
    """Builds, validates and encodes screenshot uploads."""

    def __init__(self, max_bytes: int = MAX_UPLOAD_BYTES):
        """
        Initialize upload loader.

        Args:
            max_bytes: Largest accepted upload, in bytes.
        """
        self.max_bytes = max_bytes

    @staticmethod
    def guess_media_type(filename: Union[str, Path]) -> Optional[str]:
        """
        Guess the media type of a screenshot from its file suffix.

        Args:
            filename: File name or path.

        Returns:
            Media type, or None for unsupported suffixes.
        """
        return MEDIA_TYPES_BY_SUFFIX.get(Path(filename).suffix.lower())

    def from_bytes(
        self,
        data: bytes,
        media_type: Optional[str] = None,
        filename: str = "upload.png"
    ) -> ImageUpload:
        """
        Wrap raw bytes in an ImageUpload.

        Args:
            data: Image bytes.
            media_type: Declared media type (guessed from filename if omitted).
            filename: Original file name.

        Returns:
            ImageUpload object.
        """
        media_type = media_type or self.guess_media_type(filename) or "application/octet-stream"
        return ImageUpload(filename=filename, media_type=media_type, data=data)

    def load_path(self, image_path: Union[str, Path]) -> ImageUpload:
        """
        Load a screenshot from disk.

        Args:
            image_path: Path to the image file.

        Returns:
            ImageUpload object.
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        return self.from_bytes(image_path.read_bytes(), filename=image_path.name)

    def validate(self, upload: ImageUpload) -> ImageUpload:
        """
        Check media type and size, raising on the first violation.

        Args:
            upload: Upload to validate.

        Returns:
            The same upload, for chaining.
        """
        if not upload.is_allowed_type():
            raise UnsupportedMediaTypeError()
        if not upload.is_within_limit(self.max_bytes):
            raise UploadTooLargeError.for_limit(self.max_bytes)
        return upload

    def check(self, upload: ImageUpload) -> Tuple[bool, Optional[str]]:
        """
        Validate without raising.

        Returns:
            Tuple of (is_valid, error_message).
        """
        try:
            self.validate(upload)
            return True, None
        except (UnsupportedMediaTypeError, UploadTooLargeError) as e:
            return False, e.message

    def image_size(self, upload: ImageUpload) -> Optional[Tuple[int, int]]:
        """
        Read the pixel dimensions of an upload.

        Returns:
            (width, height), or None if Pillow cannot decode the bytes.
        """
        try:
            with Image.open(BytesIO(upload.data)) as image:
                return image.size
        except (OSError, ValueError):
            return None

    def prepare_for_llm(self, upload: ImageUpload, prompt: str) -> ConversionRequest:
        """
        Encode an upload for the generation API.

        Args:
            upload: Validated upload.
            prompt: Instruction text sent alongside the image.

        Returns:
            ConversionRequest with base64 data.
        """
        return ConversionRequest(
            image_base64=base64.b64encode(upload.data).decode("utf-8"),
            media_type=upload.media_type,
            prompt=prompt,
        )
