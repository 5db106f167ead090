"""Centralized configuration for the Clinic Dashboard service.

Value resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/clinic-dashboard/<VARIABLE_NAME>``.
Nothing here is mandatory: an unset webhook URL only matters when a user
action needs it, and is reported to the user at that moment.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Value resolution ─────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.
    """
    try:
        import boto3  # noqa: PLC0415: lazy import, boto3 is an optional extra

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/clinic-dashboard/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _optional_env(name: str, default: str = "") -> str:
    """Return a config value from env-var or SSM, or *default*."""
    value = os.getenv(name)
    if value:
        return value.strip()

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value.strip()

    return default


def _flag(name: str, default: bool) -> bool:
    return _optional_env(name, "true" if default else "false").lower() in ("1", "true", "yes")


def _optional_float(name: str) -> float | None:
    raw = _optional_env(name)
    return float(raw) if raw else None


# ── Automation webhook (the "n8n" integration) ──────────────────────
WEBHOOK_URL: str = _optional_env("WEBHOOK_URL")
WEBHOOK_CONNECTED: bool = _flag("WEBHOOK_CONNECTED", False)
# Unset means requests wait as long as the remote end takes
WEBHOOK_TIMEOUT_SECONDS: float | None = _optional_float("WEBHOOK_TIMEOUT_SECONDS")

# ── Authentication collaborator ─────────────────────────────────────
AUTH_WEBHOOK_URL: str = _optional_env("AUTH_WEBHOOK_URL")
LOGIN_BYPASS: bool = _flag("LOGIN_BYPASS", True)
BYPASS_USER_EMAIL: str = _optional_env("BYPASS_USER_EMAIL", "dev@clinica.com")

# ── Chat console / UI ───────────────────────────────────────────────
CHAT_CONSOLE_URL: str = _optional_env("CHAT_CONSOLE_URL")
DEFAULT_THEME: str = _optional_env("DEFAULT_THEME", "light")

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
