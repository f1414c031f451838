"""Resource and cost collectors for AWS Resource Audit."""

from aws_resource_audit.collectors.base import (
    CollectionResult,
    CollectionStatus,
    CostPeriod,
    CostResult,
    CostSnapshot,
    CostUnavailable,
    ResourceCollector,
    ResourceRecord,
)
from aws_resource_audit.collectors.resources import COLLECTORS, get_collector
from aws_resource_audit.collectors.aws_cost_explorer import CostExplorerCollector
from aws_resource_audit.collectors.regions import resolve_regions

__all__ = [
    "CollectionResult",
    "CollectionStatus",
    "CostPeriod",
    "CostResult",
    "CostSnapshot",
    "CostUnavailable",
    "ResourceCollector",
    "ResourceRecord",
    "COLLECTORS",
    "get_collector",
    "CostExplorerCollector",
    "resolve_regions",
]
