"""Fatal error taxonomy and process exit codes."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit status, one per fatal category."""

    SUCCESS = 0
    USAGE = 1
    AUTH = 2
    CONFIG = 3
    RUNTIME = 4
    INTERRUPTED = 5


class AuditError(Exception):
    """
    Base class for errors that abort an audit run.

    Only these surface to the user as a failed run; per-call AWS errors and
    notification failures are degraded and logged instead.
    """

    exit_code: ExitCode = ExitCode.RUNTIME

    def __init__(self, message: str, remediation: str | None = None):
        super().__init__(message)
        self.message = message
        self.remediation = remediation


class UsageError(AuditError):
    """Missing or malformed command line arguments."""

    exit_code = ExitCode.USAGE


class UnsupportedServiceError(UsageError):
    """A service name outside the supported set."""

    def __init__(self, service: str, supported: list[str]):
        super().__init__(
            f"Unsupported service: {service}",
            remediation=f"Supported services: {', '.join(supported)}",
        )
        self.service = service


class DependencyError(AuditError):
    """A required library is not installed."""

    exit_code = ExitCode.USAGE


class CredentialsError(AuditError):
    """AWS credentials are missing or do not resolve to an identity."""

    exit_code = ExitCode.AUTH


class ConfigError(AuditError):
    """Configuration values failed validation."""

    exit_code = ExitCode.CONFIG


class RegionDiscoveryError(AuditError):
    """The region list could not be fetched for an ``all`` audit."""

    exit_code = ExitCode.RUNTIME
