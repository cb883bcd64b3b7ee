from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from app.models.credentials import ClientCredentials

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

GOOGLE_AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://accounts.google.com/o/oauth2/token"
DEFAULT_SCOPES = "email https://www.googleapis.com/auth/gmail.readonly"


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: str) -> bool:
    raw = _getenv(name, default).lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    client_id: str
    client_secret: str
    authorization_endpoint: str
    token_endpoint: str
    redirect_uri: str
    scopes: tuple[str, ...]
    token_exchange_timeout_sec: float
    state_cookie_name: str
    state_cookie_ttl_sec: int
    cookie_secure: bool

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def credentials(self) -> ClientCredentials:
        return ClientCredentials(
            client_id=self.client_id, client_secret=self.client_secret
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def __repr__(self) -> str:
        # The generated dataclass repr would print client_secret verbatim.
        return (
            f"Settings(app_env={self.app_env!r}, port={self.port}, "
            f"client_id={self.client_id!r}, client_secret='***', "
            f"token_endpoint={self.token_endpoint!r}, "
            f"redirect_uri={self.redirect_uri!r})"
        )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "2345")
    timeout_raw = _getenv("TOKEN_EXCHANGE_TIMEOUT_SEC", "10")
    cookie_ttl_raw = _getenv("STATE_COOKIE_TTL_SEC", "600")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"TOKEN_EXCHANGE_TIMEOUT_SEC must be a number (got {timeout_raw!r})"
        ) from None
    if timeout <= 0:
        raise ValueError(
            f"TOKEN_EXCHANGE_TIMEOUT_SEC must be positive (got {timeout_raw!r})"
        )

    try:
        cookie_ttl = int(cookie_ttl_raw)
    except ValueError:
        raise ValueError(
            f"STATE_COOKIE_TTL_SEC must be an integer (got {cookie_ttl_raw!r})"
        ) from None

    state_cookie_name = _getenv("STATE_COOKIE_NAME", "oauthState")
    if not state_cookie_name:
        raise ValueError("STATE_COOKIE_NAME must not be empty")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", "false"),
        port=port,
        client_id=_getenv("CLIENT_ID", ""),
        client_secret=_getenv("CLIENT_SECRET", ""),
        authorization_endpoint=_getenv(
            "AUTHORIZATION_ENDPOINT", GOOGLE_AUTHORIZATION_ENDPOINT
        ),
        token_endpoint=_getenv("TOKEN_ENDPOINT", GOOGLE_TOKEN_ENDPOINT),
        redirect_uri=_getenv("REDIRECT_URI", "http://localhost:2345/oauth2/callback"),
        scopes=tuple(_getenv("OAUTH_SCOPES", DEFAULT_SCOPES).split()),
        token_exchange_timeout_sec=timeout,
        state_cookie_name=state_cookie_name,
        state_cookie_ttl_sec=cookie_ttl,
        cookie_secure=_getenv_bool("COOKIE_SECURE", "false"),
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
