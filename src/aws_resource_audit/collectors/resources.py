"""Per-service resource collectors."""

from __future__ import annotations

from collections.abc import Iterator

import boto3
from botocore.exceptions import OperationNotPageableError

from aws_resource_audit.collectors.base import ResourceCollector
from aws_resource_audit.models import ServiceTag


def safe_paginate(client, method_name: str, result_key: str, **kwargs) -> Iterator[dict]:
    """Iterate through paginated boto3 results, falling back to a single call."""
    try:
        paginator = client.get_paginator(method_name)
    except OperationNotPageableError:
        response = getattr(client, method_name)(**kwargs)
        yield from response[result_key]
        return

    for page in paginator.paginate(**kwargs):
        yield from page[result_key]


class EC2InstanceCollector(ResourceCollector):
    """EC2 instance ids."""

    service = ServiceTag.EC2
    client_name = "ec2"
    operation = "DescribeInstances"

    def _list_identifiers(self, region: str) -> Iterator[str]:
        for reservation in safe_paginate(self.client(region), "describe_instances", "Reservations"):
            for instance in reservation["Instances"]:
                yield instance["InstanceId"]


class S3BucketCollector(ResourceCollector):
    """S3 bucket names. Buckets are global, so the region is ignored."""

    service = ServiceTag.S3
    client_name = "s3"
    operation = "ListBuckets"

    def client(self, region: str):
        return self.session.client(self.client_name)

    def _list_identifiers(self, region: str) -> Iterator[str]:
        response = self.client(region).list_buckets()
        for bucket in response["Buckets"]:
            yield bucket["Name"]


class EBSVolumeCollector(ResourceCollector):
    """Unattached (``available``) EBS volume ids."""

    service = ServiceTag.EBS
    client_name = "ec2"
    operation = "DescribeVolumes"

    def _list_identifiers(self, region: str) -> Iterator[str]:
        volumes = safe_paginate(
            self.client(region),
            "describe_volumes",
            "Volumes",
            Filters=[{"Name": "status", "Values": ["available"]}],
        )
        for volume in volumes:
            yield volume["VolumeId"]


class LambdaFunctionCollector(ResourceCollector):
    """Lambda function names."""

    service = ServiceTag.LAMBDA
    client_name = "lambda"
    operation = "ListFunctions"

    def _list_identifiers(self, region: str) -> Iterator[str]:
        for function in safe_paginate(self.client(region), "list_functions", "Functions"):
            yield function["FunctionName"]


class RDSInstanceCollector(ResourceCollector):
    """RDS DB instance identifiers."""

    service = ServiceTag.RDS
    client_name = "rds"
    operation = "DescribeDBInstances"

    def _list_identifiers(self, region: str) -> Iterator[str]:
        for instance in safe_paginate(self.client(region), "describe_db_instances", "DBInstances"):
            yield instance["DBInstanceIdentifier"]


COLLECTORS: dict[ServiceTag, type[ResourceCollector]] = {
    collector.service: collector
    for collector in (
        EC2InstanceCollector,
        S3BucketCollector,
        EBSVolumeCollector,
        LambdaFunctionCollector,
        RDSInstanceCollector,
    )
}

_missing = set(ServiceTag) - set(COLLECTORS)
if _missing:
    raise RuntimeError(
        "No collector registered for service(s): "
        + ", ".join(sorted(tag.value for tag in _missing))
    )


def get_collector(service: ServiceTag, session: boto3.session.Session) -> ResourceCollector:
    """Return the collector for a service tag."""
    return COLLECTORS[service](session)
