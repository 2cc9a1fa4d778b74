"""One reporting cycle: scrape, build, persist, email."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

from flotilla_report.common.config import Settings
from flotilla_report.export import csv as export_csv
from flotilla_report.notify.mailer import send_with_retry
from flotilla_report.persist import HISTORY_NAME, HistoryStore, save_latest
from flotilla_report.reporting import build_report, history_entry
from flotilla_report.schemas.models import (
    DeliveryResult,
    ReportEnvelope,
    VesselRecord,
    WorkflowResult,
)
from flotilla_report.scrape import scrape_with_retry

log = logging.getLogger(__name__)

Scrape = Callable[[Settings], list[VesselRecord]]
Deliver = Callable[[ReportEnvelope, Settings], DeliveryResult]


def _scrape(settings: Settings) -> list[VesselRecord]:
    return scrape_with_retry(settings.scraper)


def persist_report(envelope: ReportEnvelope, settings: Settings) -> None:
    """Write the latest slot and CSV, then append to history.

    A failed history write is logged and does not fail the cycle.
    """
    save_latest(envelope, settings.data_dir)
    export_csv.run(envelope, settings.export_dir)
    store = HistoryStore(settings.data_dir / HISTORY_NAME, cap=settings.history_cap)
    try:
        store.append(history_entry(envelope))
    except OSError as exc:
        log.error("error updating history: %s", exc)


def run_workflow(
    settings: Settings,
    scrape: Scrape = _scrape,
    deliver: Deliver = send_with_retry,
    now: datetime | None = None,
) -> WorkflowResult:
    start = time.monotonic()
    log.info("=== starting flotilla report workflow ===")
    try:
        log.info("step 1: scraping vessel data")
        vessels = scrape(settings)
        log.info("scraped %d vessels", len(vessels))

        log.info("step 2: processing vessel data")
        envelope = build_report(vessels, now=now, tz=settings.timezone)
        persist_report(envelope, settings)

        log.info("step 3: sending email report")
        delivery = deliver(envelope, settings)
        log.info("email sent to %s (message id %s)", delivery.recipient, delivery.message_id)
    except Exception as exc:
        log.error("=== workflow failed after %.2fs: %s ===", time.monotonic() - start, exc)
        raise

    duration = round(time.monotonic() - start, 2)
    log.info("=== workflow completed in %.2fs ===", duration)
    return WorkflowResult(
        success=True,
        duration_s=duration,
        vessels=envelope.total_vessels,
        email_sent=delivery.success,
        message_id=delivery.message_id,
    )
