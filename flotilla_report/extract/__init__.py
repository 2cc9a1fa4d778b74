from .incidents import IncidentPredicate, looks_like_incident
from .parse import extract_all, extract_vessel

__all__ = ["IncidentPredicate", "extract_all", "extract_vessel", "looks_like_incident"]
