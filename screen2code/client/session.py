"""
Client-side state for the upload → convert → display flow.

An UploadSession owns at most one preview handle at a time. Handles come
from a PreviewRegistry, which hands out opaque ``preview://`` references to
image bytes and must be told when each one is released.
"""

from typing import Dict, Optional
from uuid import uuid4

from screen2code.client.api import ConversionAPI, ConversionFailed
from screen2code.models import DisplayTab, ImageUpload


class PreviewRegistry:
    """Issues and revokes local preview handles for uploaded images."""

    def __init__(self):
        self._handles: Dict[str, ImageUpload] = {}
        self.created = 0
        self.revoked = 0

    def create(self, upload: ImageUpload) -> str:
        handle = f"preview://{uuid4().hex}"
        self._handles[handle] = upload
        self.created += 1
        return handle

    def resolve(self, handle: str) -> bytes:
        """Get the image bytes behind a live handle."""
        if handle not in self._handles:
            raise KeyError(f"Preview handle is not active: {handle}")
        return self._handles[handle].data

    def revoke(self, handle: str):
        if handle not in self._handles:
            raise KeyError(f"Preview handle is not active: {handle}")
        del self._handles[handle]
        self.revoked += 1

    @property
    def active(self) -> int:
        return len(self._handles)

    def is_active(self, handle: str) -> bool:
        return handle in self._handles


class UploadSession:
    """State of one user's conversion screen."""

    def __init__(
        self,
        api: Optional[ConversionAPI] = None,
        previews: Optional[PreviewRegistry] = None
    ):
        self.api = api or ConversionAPI()
        self.previews = previews or PreviewRegistry()

        self.image: Optional[ImageUpload] = None
        self.preview_handle: Optional[str] = None
        self.html: Optional[str] = None
        self.error: Optional[str] = None
        self.loading = False
        self.active_tab = DisplayTab.PREVIEW

    def _release_preview(self):
        if self.preview_handle is not None:
            self.previews.revoke(self.preview_handle)
            self.preview_handle = None

    @property
    def can_convert(self) -> bool:
        """Whether the Convert button is enabled."""
        return self.image is not None and not self.loading

    @property
    def can_reset(self) -> bool:
        """Whether the Start Over button is shown."""
        return self.image is not None and not self.loading

    @property
    def has_result(self) -> bool:
        return self.html is not None

    def preview_bytes(self) -> Optional[bytes]:
        if self.preview_handle is None:
            return None
        return self.previews.resolve(self.preview_handle)

    def select_file(self, upload: Optional[ImageUpload]):
        """
        Make a newly picked file the pending upload.

        Type and size are not checked here; the server rejects bad files
        when the user converts.
        """
        if upload is None:
            return

        self.error = None
        self.html = None
        self.image = upload

        self._release_preview()
        self.preview_handle = self.previews.create(upload)

    def start_conversion(self) -> bool:
        """
        Mark a conversion as requested so the next render shows it in flight.

        Returns:
            False if there is nothing to convert or a request is already running.
        """
        if not self.can_convert:
            return False

        self.loading = True
        self.error = None
        return True

    def submit(self) -> bool:
        """
        Convert the pending upload.

        May follow start_conversion(); loading is cleared on every exit.

        Returns:
            True if HTML was received.
        """
        if self.image is None:
            self.loading = False
            return False

        self.loading = True
        self.error = None

        try:
            response = self.api.convert(self.image)
            self.html = response.html
            self.active_tab = DisplayTab.PREVIEW
            return True
        except ConversionFailed as e:
            self.error = e.message
            return False
        finally:
            self.loading = False

    def select_tab(self, tab: DisplayTab):
        self.active_tab = DisplayTab(tab)

    def reset(self):
        """Start over: drop the upload, the result, the error and the preview."""
        self.image = None
        self.html = None
        self.error = None
        self.active_tab = DisplayTab.PREVIEW
        self._release_preview()
