"""
HTTP service for screenshot conversion.
"""

from screen2code.server.app import create_app, router

__all__ = [
    "create_app",
    "router",
]
