from .history import HISTORY_CAP, HistoryStore
from .latest import HISTORY_NAME, LATEST_NAME, load_latest, save_latest

__all__ = [
    "HISTORY_CAP",
    "HISTORY_NAME",
    "LATEST_NAME",
    "HistoryStore",
    "load_latest",
    "save_latest",
]
