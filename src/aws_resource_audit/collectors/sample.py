"""Deterministic stand-ins for AWS, used by ``--test`` runs."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta

from aws_resource_audit.collectors.base import (
    CostPeriod,
    CostResult,
    CostSnapshot,
    ResourceCollector,
)
from aws_resource_audit.collectors.resources import COLLECTORS
from aws_resource_audit.models import ALL_REGIONS, ServiceTag

SAMPLE_ACCOUNT_ID = "000000000000"
SAMPLE_REGIONS = ("us-east-1", "us-west-2", "eu-west-1")

# (identifier prefix, resources per region)
_SAMPLE_SHAPE = {
    ServiceTag.EC2: ("i-0sample", 2),
    ServiceTag.S3: ("sample-bucket-", 3),
    ServiceTag.EBS: ("vol-0sample", 1),
    ServiceTag.LAMBDA: ("sample-function-", 2),
    ServiceTag.RDS: ("sample-db-", 0),
}


class SampleResourceCollector(ResourceCollector):
    """Return synthetic identifiers without calling AWS."""

    client_name = ""

    def __init__(self, service: ServiceTag):
        super().__init__(session=None)
        self.service = service
        self.operation = COLLECTORS[service].operation

    def _list_identifiers(self, region: str) -> Iterator[str]:
        prefix, count = _SAMPLE_SHAPE[self.service]
        # Buckets are global: same names in every region
        suffix = "" if self.service is ServiceTag.S3 else f"-{region}"
        for n in range(1, count + 1):
            yield f"{prefix}{n:03d}{suffix}"


class SampleCostExplorer:
    """Return a fixed cost series for the usual trailing window."""

    collector_name = "sample_cost_explorer"

    def __init__(self, lookback_days: int = 30, daily_amount: float = 4.25):
        self.lookback_days = lookback_days
        self.daily_amount = daily_amount

    def estimate(self, tag_key: str, tag_value: str, today: date | None = None) -> CostResult:
        end_date = today or date.today()
        start_date = end_date - timedelta(days=self.lookback_days)

        # One period per calendar month touched by the window
        periods = []
        period_start = start_date
        while period_start < end_date:
            next_month = (period_start.replace(day=1) + timedelta(days=32)).replace(day=1)
            period_end = min(next_month, end_date)
            days = (period_end - period_start).days
            periods.append(
                CostPeriod(
                    start=period_start.isoformat(),
                    end=period_end.isoformat(),
                    amount=round(days * self.daily_amount, 2),
                )
            )
            period_start = period_end

        return CostSnapshot(
            start=start_date.isoformat(),
            end=end_date.isoformat(),
            tag_key=tag_key,
            tag_value=tag_value,
            periods=tuple(periods),
        )


def resolve_sample_regions(selector: str) -> list[str]:
    if selector == ALL_REGIONS:
        return list(SAMPLE_REGIONS)
    return [selector]
