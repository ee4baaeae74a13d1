"""
Runtime configuration loaded from the environment (and ``.env``).
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from screen2code.models import MAX_UPLOAD_BYTES


def _split_origins(raw: str) -> Tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Service settings. Read once at startup and never mutated."""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    host: str = "0.0.0.0"
    port: int = 5000
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def has_credentials(self) -> bool:
        return bool(self.gemini_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Returns:
            Settings populated from GEMINI_API_KEY, GEMINI_MODEL, HOST, PORT
            and CORS_ORIGINS.
        """
        load_dotenv()

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")) or ("*",),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
