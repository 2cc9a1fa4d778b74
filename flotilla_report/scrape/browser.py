"""Walk the tracker page with Playwright Chromium and collect row texts.

Vessel rows are collapsed by default; each one is expanded so its detail
panel (last update, speed, course, position) is rendered, read through the
parent container, then collapsed again.
"""

from __future__ import annotations

import logging
import os

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, sync_playwright

from flotilla_report.common.config import ScraperConfig
from flotilla_report.sensors import sensor

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118 Safari/537.36"
)

CLICK_TIMEOUT_MS = 5000
COLLAPSE_WAIT_MS = 300


def _launch_options(cfg: ScraperConfig) -> dict:
    opts: dict = {
        "headless": cfg.headless,
        "timeout": cfg.timeout_seconds * 1000,
        "args": ["--disable-blink-features=AutomationControlled"],
    }
    if os.getenv("USE_PROXY_PLAYWRIGHT", "").lower() == "true" and (
        proxy := os.getenv("HTTPS_PROXY") or os.getenv("HTTP_PROXY")
    ):
        opts["proxy"] = {"server": proxy}
    return opts


def _expand_row(page: Page, row: Locator, index: int, cfg: ScraperConfig) -> str | None:
    """Return the expanded text of *row*, or None if it is not a data row."""
    button = row.locator("button").first
    if button.count() == 0:
        log.debug("row %d has no expand button, skipping", index)
        return None

    lines = [line for line in row.inner_text().splitlines() if line.strip()]
    if len(lines) < 2:
        return None

    button.click(timeout=CLICK_TIMEOUT_MS)
    page.wait_for_timeout(cfg.expand_ms)
    # the detail panel renders as a sibling of the row, not inside it
    text = row.locator("..").inner_text()
    if index == 1:
        log.debug("first row expanded text: %s", text[:500])

    try:
        button.click(timeout=CLICK_TIMEOUT_MS)
        page.wait_for_timeout(COLLAPSE_WAIT_MS)
    except PlaywrightError as exc:
        log.debug("row %d did not collapse: %s", index, exc)
    return text


@sensor("scrape")
def fetch_entity_blocks(cfg: ScraperConfig) -> list[tuple[int, str]]:
    """Return ``(index, text)`` for every expandable row on ``cfg.url``.

    Indexes are 1-based row positions. A row that fails to expand is logged
    and skipped; navigation failures propagate so the caller can retry.
    """
    blocks: list[tuple[int, str]] = []
    with sync_playwright() as pw:
        browser = pw.chromium.launch(**_launch_options(cfg))
        try:
            ctx = browser.new_context(
                user_agent=USER_AGENT,
                java_script_enabled=True,
                viewport={"width": 1920, "height": 1080},
            )
            page = ctx.new_page()
            log.info("starting scrape of %s", cfg.url)
            page.goto(cfg.url, timeout=cfg.timeout_seconds * 1000, wait_until="networkidle")
            page.wait_for_timeout(cfg.settle_ms)

            rows = page.locator(cfg.row_selector).all()
            log.info("found %d potential rows (vessels + incidents)", len(rows))
            for index, row in enumerate(rows, start=1):
                try:
                    text = _expand_row(page, row, index, cfg)
                except PlaywrightError as exc:
                    log.warning("error processing row %d: %s", index, exc)
                    continue
                if text is not None:
                    blocks.append((index, text))
        finally:
            browser.close()
    return blocks
