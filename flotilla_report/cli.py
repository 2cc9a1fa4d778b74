from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from flotilla_report.common import Settings, load_settings
from flotilla_report.common.env import ConfigurationError, check_delivery_config
from flotilla_report.common.retry import RetryExhaustedError
from flotilla_report.notify.mailer import send_with_retry
from flotilla_report.persist import load_latest
from flotilla_report.reporting import build_report
from flotilla_report.scheduler import CycleState, Scheduler, run_scheduled_cycle
from flotilla_report.scrape import scrape_with_retry
from flotilla_report.workflow import run_workflow

log = logging.getLogger(__name__)


def _cmd_run(settings: Settings, _args: argparse.Namespace) -> int:
    log.info("running workflow manually")
    state = run_scheduled_cycle(
        CycleState(), lambda: run_workflow(settings), settings.schedule.alert_threshold
    )
    if state.consecutive_failures:
        log.error("manual execution failed: %s", state.last_error)
        return 1
    log.info("manual execution completed")
    return 0


def _cmd_schedule(settings: Settings, _args: argparse.Namespace) -> int:
    scheduler = Scheduler(settings)
    scheduler.install_signal_handlers()
    scheduler.serve()
    return 0


def _cmd_scrape(settings: Settings, _args: argparse.Namespace) -> int:
    try:
        vessels = scrape_with_retry(settings.scraper)
    except RetryExhaustedError as exc:
        log.error("scraping failed: %s", exc)
        return 1
    json.dump([v.model_dump(mode="json") for v in vessels], sys.stdout, indent=2)
    sys.stdout.write(f"\nTotal vessels scraped: {len(vessels)}\n")
    return 0


def _cmd_build(settings: Settings, args: argparse.Namespace) -> int:
    raw = json.loads(Path(args.file).read_text())
    envelope = build_report(raw, tz=settings.timezone)
    json.dump(envelope.model_dump(mode="json"), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def _cmd_send_latest(settings: Settings, _args: argparse.Namespace) -> int:
    try:
        envelope = load_latest(settings.data_dir)
        result = send_with_retry(envelope, settings)
    except (FileNotFoundError, RetryExhaustedError) as exc:
        log.error("failed to send email: %s", exc)
        return 1
    log.info("email sent to %s (message id %s)", result.recipient, result.message_id)
    return 0


# commands that end in sending email
DELIVERING = {"run", "schedule", "send-latest"}

COMMANDS = {
    "run": _cmd_run,
    "schedule": _cmd_schedule,
    "scrape": _cmd_scrape,
    "build": _cmd_build,
    "send-latest": _cmd_send_latest,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flotilla-report",
        description="Scrape the flotilla tracker and email an hourly vessel report.",
    )
    parser.add_argument("--config", type=Path, help="path to settings.yml")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="run one cycle now; exit 1 on failure")
    sub.add_parser("schedule", help="run every hour on the hour (default)")
    sub.add_parser("scrape", help="scrape and print vessels as JSON")
    build = sub.add_parser("build", help="build a report from a JSON list of raw records")
    build.add_argument("file", type=Path)
    sub.add_parser("send-latest", help="email the last saved report")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    command = args.command or "schedule"
    if command in DELIVERING:
        try:
            check_delivery_config(settings)
        except ConfigurationError as exc:
            log.error("configuration error: %s", exc)
            return 1
    return COMMANDS[command](settings, args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
