"""Authentication helpers for the Feishu/Lark open platform.

This module centralizes creation of a lark-oapi `Client` and resolves
credentials and settings from explicit arguments or the environment.
"""

from __future__ import annotations

import os

import lark_oapi as lark

APP_ID_ENV = "BITABLE_APP_ID"
APP_SECRET_ENV = "BITABLE_APP_SECRET"
DOMAIN_ENV = "BITABLE_DOMAIN"
SDK_LOG_LEVEL_ENV = "BITABLE_LOG_LEVEL"
PAGE_SIZE_ENV = "BITABLE_PAGE_SIZE"

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500

_DOMAINS = {
    "feishu": lark.FEISHU_DOMAIN,
    "lark": lark.LARK_DOMAIN,
}


class AuthError(RuntimeError):
    """Raised when credentials are missing or the client cannot be built."""


def _resolve_domain(value: str | None) -> str:
    """
    Map a domain setting to an open-platform base URL.

    Accepts the short names `feishu`/`lark` or a full `https://` URL.
    An empty value means Feishu.
    """
    if not value:
        return lark.FEISHU_DOMAIN
    value = value.strip()
    if value.startswith("http://") or value.startswith("https://"):
        return value.rstrip("/")
    try:
        return _DOMAINS[value.lower()]
    except KeyError as exc:
        raise AuthError(
            f"Unknown {DOMAIN_ENV} '{value}'. Use 'feishu', 'lark' or a base URL."
        ) from exc


def _resolve_sdk_log_level(value: str | None) -> lark.LogLevel:
    """Return the SDK log level, defaulting to ERROR to keep the SDK quiet."""
    if not value:
        return lark.LogLevel.ERROR
    try:
        return lark.LogLevel[value.strip().upper()]
    except KeyError:
        return lark.LogLevel.ERROR


def page_size_from_env() -> int:
    """Return the record page size, honoring the env override."""
    raw = os.getenv(PAGE_SIZE_ENV)
    if raw is None:
        return DEFAULT_PAGE_SIZE
    try:
        return min(max(int(raw), 1), MAX_PAGE_SIZE)
    except ValueError:
        return DEFAULT_PAGE_SIZE


def get_client(app_id: str | None = None, app_secret: str | None = None) -> lark.Client:
    """
    Create and return a configured lark-oapi Client.

    Explicit credentials win over the `BITABLE_APP_ID` and
    `BITABLE_APP_SECRET` environment variables.
    """
    app_id = app_id or os.getenv(APP_ID_ENV)
    app_secret = app_secret or os.getenv(APP_SECRET_ENV)
    if not app_id or not app_secret:
        raise AuthError(
            "Missing app credentials. Pass --app-id/--app-secret or set "
            f"{APP_ID_ENV} and {APP_SECRET_ENV}."
        )

    return (
        lark.Client.builder()
        .app_id(app_id)
        .app_secret(app_secret)
        .domain(_resolve_domain(os.getenv(DOMAIN_ENV)))
        .log_level(_resolve_sdk_log_level(os.getenv(SDK_LOG_LEVEL_ENV)))
        .build()
    )
