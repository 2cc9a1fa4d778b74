from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

# Resolve the configuration path relative to the project root rather than
# the current working directory.
CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "settings.yml"

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"


class ScraperConfig(BaseModel):
    url: str = "https://flotilla-orpin.vercel.app/"
    headless: bool = True
    timeout_seconds: int = 30
    retry_attempts: int = 3
    settle_ms: int = 3000
    expand_ms: int = 1500
    row_selector: str = 'div[class*="cursor-pointer"]:has(button)'


class EmailConfig(BaseModel):
    smtp_host: str = "smtp.resend.com"
    smtp_port: int = 465
    smtp_user: str = "resend"
    sender_email: str = "admin@manamurah.com"
    sender_name: str = "ManaMurah"
    recipient: str = "azmi@aga.my"
    subject_prefix: str = "Flotilla Sumud Report"
    retry_attempts: int = 3
    timeout_seconds: int = 30


class ScheduleConfig(BaseModel):
    alert_threshold: int = 3


class Settings(BaseModel):
    model_config = ConfigDict(extra="allow")

    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    timezone: str = DEFAULT_TIMEZONE
    timezone_label: str = "MYT"
    data_dir: Path = Path("data")
    export_dir: Path = Path("exports")
    history_cap: int = 720


# environment variable -> (section, key); section None means top level
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "FLOTILLA_URL": ("scraper", "url"),
    "HEADLESS_MODE": ("scraper", "headless"),
    "TIMEOUT_SECONDS": ("scraper", "timeout_seconds"),
    "RETRY_ATTEMPTS": ("scraper", "retry_attempts"),
    "SMTP_HOST": ("email", "smtp_host"),
    "SMTP_PORT": ("email", "smtp_port"),
    "SMTP_SENDER_EMAIL": ("email", "sender_email"),
    "SMTP_SENDER_NAME": ("email", "sender_name"),
    "RECIPIENT_EMAIL": ("email", "recipient"),
    "EMAIL_RETRY_ATTEMPTS": ("email", "retry_attempts"),
    "TIMEZONE": (None, "timezone"),
    "DATA_DIR": (None, "data_dir"),
    "EXPORT_DIR": (None, "export_dir"),
}


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    for var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        target = data.setdefault(section, {}) if section else data
        target[key] = value
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from YAML, then apply environment overrides."""
    if path is None:
        path = Path(os.environ.get("FLOTILLA_CONFIG", CONFIG_PATH))
    data: dict[str, Any] = {}
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    else:
        log.debug("no settings file at %s, using defaults", path)
    return Settings(**_apply_env(data))
