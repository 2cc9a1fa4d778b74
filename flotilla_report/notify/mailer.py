"""Render the vessel report as HTML + plain text and send it over SMTP."""

from __future__ import annotations

import logging
import smtplib
from collections.abc import Callable
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from flotilla_report.common.config import EmailConfig, Settings
from flotilla_report.common.env import API_KEY_ENV, require_env
from flotilla_report.common.retry import RetryPolicy
from flotilla_report.schemas.models import DeliveryResult, ReportEnvelope
from flotilla_report.sensors import sensor

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
HTML_TEMPLATE = "report.html.j2"
TEXT_TEMPLATE = "report.txt.j2"

Transport = Callable[[EmailMessage, EmailConfig], None]

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=lambda name: bool(name and name.endswith(".html.j2")),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_email(envelope: ReportEnvelope) -> tuple[str, str]:
    """Return ``(html, text)`` bodies for *envelope*."""
    context = {
        "report": envelope,
        "summary": envelope.summary,
        "most_recent_update": envelope.summary.most_recent_update or "N/A",
    }
    html = _env.get_template(HTML_TEMPLATE).render(**context)
    text = _env.get_template(TEXT_TEMPLATE).render(**context)
    return html, text


def build_message(envelope: ReportEnvelope, settings: Settings) -> EmailMessage:
    cfg = settings.email
    html, text = render_email(envelope)
    msg = EmailMessage()
    msg["Subject"] = (
        f"{cfg.subject_prefix} - {envelope.report_generated_display} {settings.timezone_label}"
    )
    msg["From"] = formataddr((cfg.sender_name, cfg.sender_email))
    msg["To"] = cfg.recipient
    msg["Message-ID"] = make_msgid(domain=cfg.sender_email.rpartition("@")[2] or None)
    msg.set_content(text)
    msg.add_alternative(html, subtype="html")
    return msg


def smtp_transport(msg: EmailMessage, cfg: EmailConfig) -> None:
    """Send *msg* over implicit-TLS SMTP."""
    password = require_env(API_KEY_ENV)
    with smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout_seconds) as smtp:
        smtp.login(cfg.smtp_user, password)
        smtp.send_message(msg)


@sensor("email")
def send_report(
    envelope: ReportEnvelope, settings: Settings, transport: Transport = smtp_transport
) -> DeliveryResult:
    cfg = settings.email
    log.info("preparing to send email report")
    msg = build_message(envelope, settings)
    log.info("sending email to %s", cfg.recipient)
    try:
        transport(msg, cfg)
    except (smtplib.SMTPException, OSError) as exc:
        log.error("failed to send email: %s", exc)
        raise
    log.info("email sent successfully: %s", msg["Message-ID"])
    return DeliveryResult(success=True, message_id=msg["Message-ID"], recipient=cfg.recipient)


def send_with_retry(
    envelope: ReportEnvelope,
    settings: Settings,
    transport: Transport = smtp_transport,
    policy: RetryPolicy | None = None,
) -> DeliveryResult:
    if policy is None:
        policy = RetryPolicy(settings.email.retry_attempts, label="email")
    return policy.call(send_report, envelope, settings, transport=transport)
