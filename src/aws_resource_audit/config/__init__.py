"""Configuration management for AWS Resource Audit."""

from aws_resource_audit.config.schema import (
    AuditConfig,
    CostConfig,
    EmailConfig,
    ReportConfig,
    SlackConfig,
    SMTPConfig,
)
from aws_resource_audit.config.loader import CONFIG_SEARCH_ORDER, load_config

__all__ = [
    "AuditConfig",
    "CostConfig",
    "EmailConfig",
    "ReportConfig",
    "SlackConfig",
    "SMTPConfig",
    "CONFIG_SEARCH_ORDER",
    "load_config",
]
