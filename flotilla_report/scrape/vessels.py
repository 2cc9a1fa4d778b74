from __future__ import annotations

import logging
from collections.abc import Callable

from flotilla_report.common.config import ScraperConfig
from flotilla_report.common.retry import RetryPolicy
from flotilla_report.extract import IncidentPredicate, extract_all, looks_like_incident
from flotilla_report.schemas.models import VesselRecord
from flotilla_report.scrape.browser import fetch_entity_blocks

log = logging.getLogger(__name__)

BlockSource = Callable[[ScraperConfig], list[tuple[int, str]]]


def scrape_vessels(
    cfg: ScraperConfig,
    fetch: BlockSource = fetch_entity_blocks,
    is_incident: IncidentPredicate = looks_like_incident,
) -> list[VesselRecord]:
    """One scrape attempt: fetch the row texts and extract vessels."""
    vessels = extract_all(fetch(cfg), is_incident=is_incident)
    log.info("successfully scraped %d vessels", len(vessels))
    return vessels


def scrape_with_retry(
    cfg: ScraperConfig,
    policy: RetryPolicy | None = None,
    fetch: BlockSource = fetch_entity_blocks,
    is_incident: IncidentPredicate = looks_like_incident,
) -> list[VesselRecord]:
    if policy is None:
        policy = RetryPolicy(cfg.retry_attempts, label="scrape")
    return policy.call(scrape_vessels, cfg, fetch=fetch, is_incident=is_incident)
