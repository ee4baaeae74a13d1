"""
HTTP client for the conversion API.
"""

import os
from typing import Optional

import httpx
from dotenv import load_dotenv

from screen2code.models import ConvertResponse, ImageUpload

DEFAULT_API_URL = "http://localhost:5000/api"
GENERIC_FAILURE = "Conversion failed"


class ConversionFailed(Exception):
    """The API answered with an error, or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def default_api_url() -> str:
    load_dotenv()
    return os.getenv("SCREEN2CODE_API_URL", DEFAULT_API_URL)


class ConversionAPI:
    """Posts screenshots to ``/convert`` and returns the generated HTML."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            base_url: API root, e.g. ``http://localhost:5000/api``.
            transport: Optional httpx transport (tests use MockTransport).
            timeout: Request timeout in seconds; None waits for the model.
            client: Existing httpx client to send requests with. It is not
                closed by this class.
        """
        self.base_url = (base_url or default_api_url()).rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.client = client

    def _post(self, url: str, files: dict) -> httpx.Response:
        if self.client is not None:
            return self.client.post(url, files=files)
        with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
            return client.post(url, files=files)

    def convert(self, upload: ImageUpload) -> ConvertResponse:
        """
        Send one screenshot for conversion.

        Args:
            upload: The pending upload.

        Returns:
            ConvertResponse with the generated HTML.

        Raises:
            ConversionFailed: On any non-success status or transport error.
        """
        files = {"image": (upload.filename, upload.data, upload.media_type)}

        try:
            response = self._post(f"{self.base_url}/convert", files)
        except httpx.HTTPError as e:
            raise ConversionFailed(str(e) or GENERIC_FAILURE) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            raise ConversionFailed(data.get("error") or GENERIC_FAILURE, response.status_code)

        if "html" not in data:
            raise ConversionFailed(GENERIC_FAILURE, response.status_code)

        return ConvertResponse(html=data["html"])
