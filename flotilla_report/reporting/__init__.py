from .builder import build_report, history_entry

__all__ = ["build_report", "history_entry"]
