"""Secrets and delivery settings that must be present before a cycle runs."""

from __future__ import annotations

import os
from collections.abc import Iterable

from flotilla_report.common.config import Settings

API_KEY_ENV = "RESEND_API_KEY"


class ConfigurationError(RuntimeError):
    """One or more required settings are missing."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"missing required configuration: {', '.join(self.missing)} "
            "(create a .env file or export them before running)"
        )


def require_env(var: str) -> str:
    """Return the value of *var*, raising :class:`ConfigurationError` if unset."""
    value = os.environ.get(var)
    if not value:
        raise ConfigurationError([var])
    return value


def check_delivery_config(settings: Settings) -> None:
    """Fail fast when the email stage could never succeed."""
    required = {
        API_KEY_ENV: os.environ.get(API_KEY_ENV),
        "SMTP_SENDER_EMAIL": settings.email.sender_email,
        "RECIPIENT_EMAIL": settings.email.recipient,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(missing)
