"""Run summary handed to notification channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class AuditSummary:
    """What a finished audit found, plus where its reports are."""

    total_resources: int
    regions: list[str]
    services: list[str]
    report_dir: str
    account: str
    generated_at: datetime
    narrative_report: Path | None = None
    attachments: list[Path] = field(default_factory=list)
    cost_total: float | None = None
    cost_currency: str = "USD"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"
