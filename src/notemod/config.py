"""
Module: config

Purpose:
    Configuration dataclass for the editor. Immutable configuration with
    validation on construction, buildable from environment variables.

Key Classes:
    - EditorConfig: Generation, imaging and auth settings

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - generation.gemini_client: Model, key, endpoint, timeout
    - loading.rasterizer: Render scale
    - session.AuthSession: Auth settings
    - cli: Builds the config from the environment
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from notemod.core.models.images import JPEG_QUALITY
from notemod.editing.pages import DEFAULT_PAGE_SIZE

DEFAULT_MODEL = "gemini-3-pro-image-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_SESSION_PATH = Path.home() / ".notemod" / "session.json"


def _env_flag(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class EditorConfig:
    """
    Configuration for the editor (immutable).

    Attributes:
        api_key: Generation service API key (None disables generation)
        model: Image model name
        base_url: Generation REST endpoint root
        request_timeout: Seconds before a generation request gives up
        render_scale: Rasterization zoom relative to 72 dpi
        jpeg_quality: Quality for rasterized, blank and inpainted pages
        default_page_size: (width, height) of a blank page in an empty document
        removal_workers: Thread pool size for batch removal (None = auto)
        auth_required: Gate the editor behind a login
        username: Expected login name when auth is required
        password: Expected password when auth is required
        session_path: JSON file holding the login token
        session_ttl_hours: Login lifetime

    Example:
        >>> config = EditorConfig(api_key="...", render_scale=2.0)
    """

    # Generation
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 300.0

    # Imaging
    render_scale: float = 2.0
    jpeg_quality: int = JPEG_QUALITY
    default_page_size: Tuple[int, int] = DEFAULT_PAGE_SIZE
    removal_workers: Optional[int] = None

    # Authentication
    auth_required: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    session_path: Path = DEFAULT_SESSION_PATH
    session_ttl_hours: float = 24.0

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive: {self.request_timeout}")
        if self.render_scale <= 0:
            raise ValueError(f"render_scale must be positive: {self.render_scale}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in 1..100: {self.jpeg_quality}")
        width, height = self.default_page_size
        if width <= 0 or height <= 0:
            raise ValueError(f"default_page_size must be positive: {self.default_page_size}")
        if self.removal_workers is not None and self.removal_workers < 1:
            raise ValueError(f"removal_workers must be >= 1: {self.removal_workers}")
        if self.session_ttl_hours <= 0:
            raise ValueError(f"session_ttl_hours must be positive: {self.session_ttl_hours}")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EditorConfig:
        """
        Build a config from environment variables.

        Recognized variables:
            GEMINI_API_KEY / API_KEY, NOTEMOD_MODEL, NOTEMOD_BASE_URL,
            NOTEMOD_RENDER_SCALE, NOTEMOD_AUTHENTICATION, NOTEMOD_USERNAME,
            NOTEMOD_PASSWORD, NOTEMOD_SESSION_PATH
        """
        env = os.environ if environ is None else environ
        kwargs = {
            "api_key": env.get("GEMINI_API_KEY") or env.get("API_KEY") or None,
            "auth_required": _env_flag(env.get("NOTEMOD_AUTHENTICATION")),
            "username": env.get("NOTEMOD_USERNAME") or None,
            "password": env.get("NOTEMOD_PASSWORD") or None,
        }
        if env.get("NOTEMOD_MODEL"):
            kwargs["model"] = env["NOTEMOD_MODEL"]
        if env.get("NOTEMOD_BASE_URL"):
            kwargs["base_url"] = env["NOTEMOD_BASE_URL"]
        if env.get("NOTEMOD_RENDER_SCALE"):
            kwargs["render_scale"] = float(env["NOTEMOD_RENDER_SCALE"])
        if env.get("NOTEMOD_SESSION_PATH"):
            kwargs["session_path"] = Path(env["NOTEMOD_SESSION_PATH"])
        return cls(**kwargs)
