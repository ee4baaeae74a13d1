"""
Client for the conversion API and the state behind the upload screen.
"""

from screen2code.client.api import ConversionAPI, ConversionFailed
from screen2code.client.session import PreviewRegistry, UploadSession

__all__ = [
    "ConversionAPI",
    "ConversionFailed",
    "PreviewRegistry",
    "UploadSession",
]
