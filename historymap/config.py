"""Server settings read from the environment and an optional .env file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """A required setting is missing."""


@dataclass(frozen=True)
class Config:
    """Settings the server needs to start."""

    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str = ""
    port: str = "8080"


def load(env_file: Optional[Union[str, os.PathLike]] = None) -> Config:
    """Load settings, taking unset variables from ``env_file`` (default ``.env``)."""
    path = os.fspath(env_file) if env_file is not None else ".env"
    loaded = os.path.isfile(path) and load_dotenv(path, override=False)
    env = os.environ
    if not loaded and not env.get("SUPABASE_URL"):
        logger.warning("No .env file found and no environment variables set")

    config = Config(
        supabase_url=env.get("SUPABASE_URL", ""),
        supabase_anon_key=env.get("SUPABASE_ANON_KEY", ""),
        supabase_service_key=env.get("SUPABASE_SERVICE_KEY", ""),
        port=env.get("BACKEND_PORT") or "8080",
    )
    if not config.supabase_url:
        raise ConfigError("SUPABASE_URL is required")
    if not config.supabase_anon_key:
        raise ConfigError("SUPABASE_ANON_KEY is required")
    return config