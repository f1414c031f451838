"""Base classes for resource and cost collectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_resource_audit.models import ServiceTag


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@dataclass(frozen=True)
class ResourceRecord:
    """Resources of one service found in one region."""

    region: str
    service: str
    resources: tuple[str, ...] = ()
    timestamp: str = field(default_factory=_utc_now_iso)

    @property
    def count(self) -> int:
        return len(self.resources)

    def to_dict(self) -> dict[str, Any]:
        return {
            "region": self.region,
            "service": self.service,
            "resource_count": self.count,
            "resources": list(self.resources),
            "timestamp": self.timestamp,
        }


class CollectionStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"  # AWS API or transport error
    MALFORMED = "malformed"  # Response did not have the expected shape


@dataclass(frozen=True)
class CollectionResult:
    """
    Outcome of one enumeration call.

    The record is always present; on failure it is empty so the audit can
    carry on with "no data" for that region/service cell.
    """

    record: ResourceRecord
    status: CollectionStatus = CollectionStatus.OK
    error: str | None = None
    raw: str = ""

    @property
    def degraded(self) -> bool:
        return self.status is not CollectionStatus.OK


@dataclass(frozen=True)
class CostPeriod:
    """Cost for one billing period."""

    start: str  # YYYY-MM-DD
    end: str  # YYYY-MM-DD
    amount: float
    currency: str = "USD"


@dataclass(frozen=True)
class CostSnapshot:
    """Cost for resources carrying a cost-allocation tag over a time window."""

    start: str
    end: str
    tag_key: str
    tag_value: str
    periods: tuple[CostPeriod, ...] = ()

    @property
    def total(self) -> float:
        return round(sum(p.amount for p in self.periods), 2)

    @property
    def currency(self) -> str:
        return self.periods[0].currency if self.periods else "USD"

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "tag_key": self.tag_key,
            "tag_value": self.tag_value,
            "total": self.total,
            "currency": self.currency,
            "periods": [
                {
                    "start": p.start,
                    "end": p.end,
                    "amount": p.amount,
                    "currency": p.currency,
                }
                for p in self.periods
            ],
        }


@dataclass(frozen=True)
class CostUnavailable:
    """
    No cost data could be obtained.

    Kept distinct from a CostSnapshot with zero amounts: reports omit the
    cost section entirely for this value.
    """

    reason: Literal["disabled", "access_denied", "error"]
    message: str = ""


CostResult = CostSnapshot | CostUnavailable


def render_raw_table(title: str, rows: Iterable[str]) -> str:
    """Render identifiers the way ``aws ... --output table`` does."""
    rows = list(rows)
    width = max([len(title), *(len(r) for r in rows)]) + 4
    lines = [
        "-" * (width + 2),
        f"|{title.center(width)}|",
        f"+{'-' * width}+",
    ]
    for row in rows:
        lines.append(f"|  {row.ljust(width - 2)}|")
    if rows:
        lines.append(f"+{'-' * width}+")
    return "\n".join(lines) + "\n"


def _coerce_identifiers(values: Iterable[Any]) -> tuple[str, ...]:
    """Keep non-blank string identifiers, dropping anything else."""
    return tuple(v.strip() for v in values if isinstance(v, str) and v.strip())


class ResourceCollector(ABC):
    """
    Enumerate one kind of AWS resource in a region.

    Subclasses implement ``_list_identifiers``; ``collect`` wraps it with the
    degrade-to-empty failure policy so one bad region or service never aborts
    the audit.
    """

    service: ServiceTag
    client_name: str
    operation: str  # API operation name, used as the raw table title

    def __init__(self, session: boto3.session.Session):
        """
        Initialize the collector.

        Args:
            session: boto3 session used to create regional clients.
        """
        self.session = session

    def client(self, region: str):
        """Create a client for this collector's AWS service in region."""
        return self.session.client(self.client_name, region_name=region)

    @abstractmethod
    def _list_identifiers(self, region: str) -> Iterable[Any]:
        """Return resource identifiers found in region."""

    def collect(self, region: str) -> CollectionResult:
        """
        Enumerate resources in region.

        Args:
            region: AWS region name.

        Returns:
            CollectionResult; empty with a non-OK status on any failure.
        """
        service = self.service.value
        try:
            identifiers = _coerce_identifiers(self._list_identifiers(region))
        except (ClientError, BotoCoreError) as e:
            return CollectionResult(
                record=ResourceRecord(region=region, service=service),
                status=CollectionStatus.FAILED,
                error=str(e),
                raw=f"{e}\n",
            )
        except (KeyError, TypeError, AttributeError) as e:
            return CollectionResult(
                record=ResourceRecord(region=region, service=service),
                status=CollectionStatus.MALFORMED,
                error=f"Unexpected {self.operation} response: {e!r}",
                raw=f"Unexpected {self.operation} response: {e!r}\n",
            )

        return CollectionResult(
            record=ResourceRecord(region=region, service=service, resources=identifiers),
            raw=render_raw_table(self.operation, identifiers),
        )
