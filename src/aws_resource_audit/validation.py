"""Pre-flight checks: required libraries and AWS credentials.

This module must stay importable without the AWS SDK so that a missing SDK
is reported by ``check_dependencies`` rather than by an import error.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import metadata, util
from typing import TYPE_CHECKING

from aws_resource_audit.exceptions import CredentialsError, DependencyError

if TYPE_CHECKING:
    import boto3

# The AWS SDK and the request/response layer it is built on
REQUIRED_DISTRIBUTIONS = ("boto3", "botocore")


@dataclass(frozen=True)
class CallerIdentity:
    """Result of sts:GetCallerIdentity."""

    account: str
    arn: str
    user_id: str = ""


def check_dependencies(required: tuple[str, ...] = REQUIRED_DISTRIBUTIONS) -> dict[str, str]:
    """
    Verify the required distributions are installed and importable.

    Returns:
        Mapping of distribution name to installed version.

    Raises:
        DependencyError: Listing every missing distribution.
    """
    versions: dict[str, str] = {}
    missing: list[str] = []
    for name in required:
        if util.find_spec(name) is None:
            missing.append(name)
            continue
        try:
            versions[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            missing.append(name)

    if missing:
        raise DependencyError(
            f"Missing dependencies: {' '.join(missing)}",
            remediation=f"Please install:\n  pip install {' '.join(missing)}",
        )
    return versions


def check_credentials(session: boto3.session.Session) -> CallerIdentity:
    """
    Confirm the session's credentials resolve to an AWS identity.

    Raises:
        CredentialsError: If the identity call fails for any reason.
    """
    from botocore.exceptions import BotoCoreError, ClientError

    try:
        identity = session.client("sts").get_caller_identity()
        return CallerIdentity(
            account=identity["Account"],
            arn=identity["Arn"],
            user_id=identity.get("UserId", ""),
        )
    except (ClientError, BotoCoreError, KeyError) as e:
        raise CredentialsError(
            f"AWS credentials not configured or invalid: {e}",
            remediation="Run: aws configure",
        ) from e
