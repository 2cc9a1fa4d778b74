import json
import logging
from pathlib import Path

from flotilla_report.persist.history import write_json_atomic
from flotilla_report.schemas.models import ReportEnvelope

log = logging.getLogger(__name__)

LATEST_NAME = "vessels_latest.json"
HISTORY_NAME = "vessels_history.json"


def save_latest(envelope: ReportEnvelope, data_dir: Path = Path("data")) -> Path:
    """Overwrite the latest-report slot with *envelope*."""
    out = Path(data_dir) / LATEST_NAME
    write_json_atomic(out, envelope.model_dump(mode="json"))
    log.info("saved latest data -> %s", out)
    return out


def load_latest(data_dir: Path = Path("data")) -> ReportEnvelope:
    path = Path(data_dir) / LATEST_NAME
    if not path.exists():
        raise FileNotFoundError(f"no saved report at {path}; run a cycle first")
    return ReportEnvelope(**json.loads(path.read_text()))
