from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_ASSUMED_INTERCEPTED_RE = re.compile(r"^assumed\s+intercepted$", re.I)


class VesselStatus(str, Enum):
    SAILING = "SAILING"
    INTERCEPTED = "INTERCEPTED"
    DOCKED = "DOCKED"
    ANCHORED = "ANCHORED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "VesselStatus":
        """Map free text onto a status; anything unrecognized is UNKNOWN."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        text = value.strip()
        if _ASSUMED_INTERCEPTED_RE.match(text):
            return cls.INTERCEPTED
        try:
            return cls(text.upper())
        except ValueError:
            return cls.UNKNOWN


class VesselRecord(BaseModel):
    """One vessel as read off the tracker page, before normalization."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    location: Optional[str] = None
    status: VesselStatus = VesselStatus.UNKNOWN
    last_update_utc: Optional[str] = None
    speed: Optional[str] = None
    course: Optional[str] = None
    position: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> VesselStatus:
        return VesselStatus.parse(value)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not str(data.get("name") or "").strip():
            data = {**data, "name": f"Vessel {data.get('id')}"}
        return data

    @property
    def has_vessel_data(self) -> bool:
        return bool(self.position or self.speed or self.course)


class ReportVessel(VesselRecord):
    """A vessel enriched with normalized timestamps and distance."""

    last_update_utc: str
    last_update_local: str
    last_update_local_display: str
    distance_to_gaza_nm: Optional[float] = None
    distance_to_gaza: Optional[str] = None


class SummaryStats(BaseModel):
    sailing: int = 0
    intercepted: int = 0
    docked: int = 0
    anchored: int = 0
    unknown: int = 0
    most_recent_update: Optional[str] = None


class ReportEnvelope(BaseModel):
    report_generated: str
    report_generated_display: str
    total_vessels: int
    vessels: List[ReportVessel] = Field(default_factory=list)
    summary: SummaryStats = Field(default_factory=SummaryStats)


class HistoryEntry(BaseModel):
    timestamp: str
    total_vessels: int
    summary: SummaryStats


class DeliveryResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    recipient: str


class WorkflowResult(BaseModel):
    success: bool
    duration_s: float
    vessels: int
    email_sent: bool
    message_id: Optional[str] = None
