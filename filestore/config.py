"""
Client configuration.

Values come from explicit arguments or from the environment (a local .env is
honoured through python-dotenv):

- FILE_STORE_API_URL      base URL of the storage service (required)
- FILE_STORE_API_KEY      API key exchanged for a session token (required)
- FILE_STORE_BUCKET       default bucket (optional)
- FILE_STORE_TIMEOUT      overall request deadline in seconds (default 60)
- FILE_STORE_COOKIE_NAME  name of the session cookie (default jwt_token)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_TIMEOUT = 60.0
DEFAULT_COOKIE_NAME = "jwt_token"


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if not v:
        return default
    try:
        return float(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {v!r}")


@dataclass
class FileStoreConfig:
    """Connection settings for one client instance."""
    base_url: str
    api_key: str
    bucket: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    cookie_name: str = DEFAULT_COOKIE_NAME

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("File store base URL not set (FILE_STORE_API_URL)")
        if not self.api_key:
            raise ConfigurationError("File store API key not set (FILE_STORE_API_KEY)")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(cls, **overrides) -> "FileStoreConfig":
        """
        Build a config from the environment.

        Args:
            **overrides: Explicit values that win over the environment
                (``None`` values are ignored)

        Returns:
            FileStoreConfig

        Raises:
            ConfigurationError: if the base URL or API key is missing
        """
        load_dotenv()
        values = {
            "base_url": os.getenv("FILE_STORE_API_URL", ""),
            "api_key": os.getenv("FILE_STORE_API_KEY", ""),
            "bucket": os.getenv("FILE_STORE_BUCKET") or None,
            "timeout": _env_float("FILE_STORE_TIMEOUT", DEFAULT_TIMEOUT),
            "cookie_name": os.getenv("FILE_STORE_COOKIE_NAME") or DEFAULT_COOKIE_NAME,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
