"""Pydantic configuration schema for AWS Resource Audit."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SMTPConfig(_Frozen):
    """Mail transport settings."""

    server: str = "smtp.gmail.com"
    port: int = Field(default=587, ge=1, le=65535)
    user: str = ""  # Falls back to the sender address
    password: SecretStr = SecretStr("")


class EmailConfig(_Frozen):
    """Email notification channel."""

    enabled: bool = False
    to: str = ""
    sender: str = ""  # Falls back to the recipient address
    subject: str = "AWS Resource Audit Report"
    smtp: SMTPConfig = Field(default_factory=SMTPConfig)

    @property
    def from_address(self) -> str:
        return self.sender or self.to

    @property
    def smtp_user(self) -> str:
        return self.smtp.user or self.from_address

    @property
    def configured(self) -> bool:
        return self.enabled and bool(self.to)


class SlackConfig(_Frozen):
    """Slack notification channel."""

    webhook_url: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.webhook_url)


class CostConfig(_Frozen):
    """Cost Explorer tag filter."""

    tag_key: str = "Environment"
    tag_value: str = "Production"
    lookback_days: int = Field(default=30, ge=1, le=365)


class ReportConfig(_Frozen):
    """Output locations."""

    report_dir: str = "reports"
    log_file: str = "aws_resource_audit.log"


class AuditConfig(_Frozen):
    """Root configuration, built once at startup and passed to each component."""

    source: str | None = None  # Path of the env file that was loaded

    email: EmailConfig = Field(default_factory=EmailConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    cost: CostConfig = Field(default_factory=CostConfig)
    reports: ReportConfig = Field(default_factory=ReportConfig)
