import json

import pytest

from flotilla_report import cli
from flotilla_report.common.retry import RetryExhaustedError
from flotilla_report.extract import extract_all
from flotilla_report.schemas.models import WorkflowResult


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test")


@pytest.fixture
def config_file(tmp_path):
    cfg = tmp_path / "settings.yml"
    cfg.write_text(f"data_dir: {tmp_path / 'data'}\nexport_dir: {tmp_path / 'exports'}\n")
    return cfg


def test_run_exit_codes(monkeypatch, config_file):
    ok = WorkflowResult(success=True, duration_s=0.0, vessels=1, email_sent=True)
    monkeypatch.setattr(cli, "run_workflow", lambda settings: ok)
    assert cli.main(["--config", str(config_file), "run"]) == 0

    def failing(settings):
        raise RetryExhaustedError("scrape", 3, TimeoutError("slow"))

    monkeypatch.setattr(cli, "run_workflow", failing)
    assert cli.main(["--config", str(config_file), "run"]) == 1


def test_build_prints_report(tmp_path, sample_raw, config_file, capsys):
    raw = tmp_path / "raw.json"
    raw.write_text(json.dumps(sample_raw))
    assert cli.main(["--config", str(config_file), "build", str(raw)]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["total_vessels"] == 2
    assert report["summary"]["sailing"] == 1
    assert [v["name"] for v in report["vessels"]] == ["Test Vessel 1", "Test Vessel 2"]


def test_send_latest_without_report(config_file):
    assert cli.main(["--config", str(config_file), "send-latest"]) == 1


def test_scrape_prints_vessels(monkeypatch, config_file, tracker_blocks, capsys):
    monkeypatch.setattr(cli, "scrape_with_retry", lambda cfg: extract_all(tracker_blocks))
    assert cli.main(["--config", str(config_file), "scrape"]) == 0
    out = capsys.readouterr().out
    assert "Total vessels scraped: 3" in out
    assert '"name": "Alma"' in out


def test_default_command_is_schedule(monkeypatch, config_file):
    served = []

    class FakeScheduler:
        def __init__(self, settings):
            self.settings = settings

        def install_signal_handlers(self):
            pass

        def serve(self):
            served.append(self.settings.history_cap)

    monkeypatch.setattr(cli, "Scheduler", FakeScheduler)
    assert cli.main(["--config", str(config_file)]) == 0
    assert served == [720]


def test_missing_api_key_stops_before_scheduling(monkeypatch, config_file, caplog):
    monkeypatch.delenv("RESEND_API_KEY")
    started = []
    monkeypatch.setattr(cli, "Scheduler", lambda settings: started.append(settings))
    monkeypatch.setattr(cli, "run_workflow", lambda settings: started.append(settings))
    assert cli.main(["--config", str(config_file)]) == 1
    assert cli.main(["--config", str(config_file), "run"]) == 1
    assert started == []
    assert "RESEND_API_KEY" in caplog.text


def test_missing_recipient_is_reported(monkeypatch, tmp_path):
    cfg = tmp_path / "settings.yml"
    cfg.write_text("email:\n  recipient: ''\n")
    monkeypatch.delenv("RECIPIENT_EMAIL", raising=False)
    assert cli.main(["--config", str(cfg), "send-latest"]) == 1


def test_scrape_does_not_need_email_settings(monkeypatch, config_file, tracker_blocks):
    monkeypatch.delenv("RESEND_API_KEY")
    monkeypatch.setattr(cli, "scrape_with_retry", lambda cfg: extract_all(tracker_blocks))
    assert cli.main(["--config", str(config_file), "scrape"]) == 0
