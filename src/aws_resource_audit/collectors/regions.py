"""Region resolution."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_resource_audit.exceptions import RegionDiscoveryError
from aws_resource_audit.models import ALL_REGIONS

# DescribeRegions is answered by any enabled region
DISCOVERY_REGION = "us-east-1"


def list_enabled_regions(session: boto3.session.Session) -> list[str]:
    """
    Fetch the regions enabled for the account.

    Raises:
        RegionDiscoveryError: If the DescribeRegions call fails.
    """
    client = session.client("ec2", region_name=session.region_name or DISCOVERY_REGION)
    try:
        response = client.describe_regions()
        regions = [r["RegionName"] for r in response.get("Regions", [])]
    except (ClientError, BotoCoreError, KeyError) as e:
        raise RegionDiscoveryError(
            f"Could not list AWS regions: {e}",
            remediation="Check that ec2:DescribeRegions is allowed.",
        ) from e

    if not regions:
        raise RegionDiscoveryError("DescribeRegions returned no regions")
    return regions


def resolve_regions(selector: str, session: boto3.session.Session) -> list[str]:
    """Expand a region selector into the regions to audit."""
    if selector == ALL_REGIONS:
        return list_enabled_regions(session)
    return [selector]
