"""Core request types for AWS Resource Audit."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aws_resource_audit.exceptions import UnsupportedServiceError, UsageError

ALL_REGIONS = "all"

# e.g. us-east-1, us-gov-west-1, ap-southeast-5
_REGION_PATTERN = re.compile(r"^[a-z]{2}(-[a-z]+)+-\d+$")


class ServiceTag(str, Enum):
    """Resource categories the audit knows how to enumerate."""

    EC2 = "ec2"
    S3 = "s3"
    EBS = "ebs"
    LAMBDA = "lambda"
    RDS = "rds"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def supported(cls) -> list[str]:
        return [tag.value for tag in cls]


_DESCRIPTIONS = {
    ServiceTag.EC2: "EC2 instances",
    ServiceTag.S3: "S3 buckets",
    ServiceTag.EBS: "Unattached EBS volumes",
    ServiceTag.LAMBDA: "Lambda functions",
    ServiceTag.RDS: "RDS DB instances",
}


def parse_services(value: str) -> tuple[ServiceTag, ...]:
    """
    Parse a comma-separated service list.

    Names are case-insensitive; duplicates are dropped keeping first-seen order.

    Args:
        value: Raw CLI value, e.g. "ec2,s3".

    Returns:
        Tuple of ServiceTag members.

    Raises:
        UsageError: If the list is empty.
        UnsupportedServiceError: If any name is not a known service.
    """
    names = [part.strip().lower() for part in value.split(",") if part.strip()]
    if not names:
        raise UsageError("No services given")

    tags: list[ServiceTag] = []
    for name in names:
        try:
            tag = ServiceTag(name)
        except ValueError:
            raise UnsupportedServiceError(name, ServiceTag.supported()) from None
        if tag not in tags:
            tags.append(tag)
    return tuple(tags)


def parse_region(value: str) -> str:
    """Validate a region selector: a region id or ``all``."""
    region = value.strip().lower()
    if region == ALL_REGIONS:
        return region
    if not _REGION_PATTERN.match(region):
        raise UsageError(
            f"Invalid region '{value}'",
            remediation="Use a region id such as us-east-1, or 'all'.",
        )
    return region


@dataclass(frozen=True)
class AuditRequest:
    """A single audit run as requested on the command line."""

    region: str
    services: tuple[ServiceTag, ...]
    dry_run: bool = False
    verbose: bool = False
    notify: bool = True
    estimate_cost: bool = True
    test_mode: bool = False
    config_path: Path | None = None

    @property
    def all_regions(self) -> bool:
        return self.region == ALL_REGIONS

    @property
    def service_names(self) -> list[str]:
        return [tag.value for tag in self.services]
