from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_TIMEOUT_SECONDS = 30.0

URL_ENV = "YOUTRACK_URL"
TOKEN_ENV = "YOUTRACK_TOKEN"
TIMEOUT_ENV = "YOUTRACK_TIMEOUT"
LOG_LEVEL_ENV = "YOUTRACK_LOG_LEVEL"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by every component of one client."""

    base_url: str
    token: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        base_url = (self.base_url or "").strip().rstrip("/")
        token = (self.token or "").strip()

        if not base_url:
            raise ConfigError("base_url must be provided.")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got {base_url!r}.")
        if not token:
            raise ConfigError("token must be provided.")
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be > 0.")

        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "token", token)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(base_url={self.base_url!r}, token='***', "
            f"timeout_seconds={self.timeout_seconds!r})"
        )


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str, Optional[float]]:
    """Load YouTrack base URL, token and optional timeout from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    base_url = os.getenv(URL_ENV, "").strip()
    token = os.getenv(TOKEN_ENV, "").strip()
    raw_timeout = os.getenv(TIMEOUT_ENV, "").strip()

    timeout: Optional[float] = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigError(f"{TIMEOUT_ENV} must be a number, got {raw_timeout!r}.") from exc
    return base_url, token, timeout


def config_from_env(*, use_dotenv: bool = True) -> ClientConfig:
    base_url, token, timeout = load_env_config(use_dotenv=use_dotenv)
    if not base_url or not token:
        raise ConfigError(f"Missing {URL_ENV} or {TOKEN_ENV} in environment.")
    if timeout is None:
        return ClientConfig(base_url=base_url, token=token)
    return ClientConfig(base_url=base_url, token=token, timeout_seconds=timeout)


def log_level_from_env() -> Optional[str]:
    """Optional log level for the client's own logfmt handler."""
    level = os.getenv(LOG_LEVEL_ENV, "").strip()
    return level or None


__all__ = [
    "ClientConfig",
    "DEFAULT_TIMEOUT_SECONDS",
    "load_env_config",
    "config_from_env",
    "log_level_from_env",
]
