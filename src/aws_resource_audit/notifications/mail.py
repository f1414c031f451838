"""Email delivery of audit reports over SMTP."""

from __future__ import annotations

import logging
import mimetypes
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Callable

from aws_resource_audit.config.schema import EmailConfig
from aws_resource_audit.notifications.summary import AuditSummary, DeliveryStatus

logger = logging.getLogger(__name__)

REPORT_TAIL_LINES = 30


class EmailDeliveryError(Exception):
    """Error sending the report email."""

    pass


def _tail(path: Path | None, lines: int) -> str:
    if path is None or not path.is_file():
        return ""
    return "\n".join(path.read_text(encoding="utf-8").splitlines()[-lines:])


class EmailNotifier:
    """
    Email the audit summary with the reports attached.

    Sends through an SMTP server using STARTTLS and the configured login.
    """

    def __init__(
        self,
        config: EmailConfig,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        timeout: float = 30,
    ):
        """
        Initialize the email notifier.

        Args:
            config: Email channel configuration.
            smtp_factory: SMTP client constructor, replaceable in tests.
            timeout: SMTP connection timeout in seconds.
        """
        self.config = config
        self.smtp_factory = smtp_factory
        self.timeout = timeout

    def subject(self, summary: AuditSummary) -> str:
        return f"{self.config.subject} - {summary.generated_at.strftime('%Y-%m-%d')}"

    def body(self, summary: AuditSummary) -> str:
        return (
            "AWS Resource Audit completed successfully.\n\n"
            f"Report generated: {summary.generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
            f"Total resources found: {summary.total_resources}\n"
            f"Regions scanned: {len(summary.regions)}\n"
            f"Services audited: {' '.join(summary.services)}\n\n"
            "=== REPORT SUMMARY ===\n"
            f"{_tail(summary.narrative_report, REPORT_TAIL_LINES)}\n\n"
            "Full reports are attached.\n"
        )

    def build_message(self, summary: AuditSummary) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = self.subject(summary)
        message["From"] = self.config.from_address
        message["To"] = self.config.to
        message.set_content(self.body(summary))

        for path in summary.attachments:
            if not path.is_file():
                continue
            mime_type, _ = mimetypes.guess_type(path.name)
            maintype, subtype = (mime_type or "application/octet-stream").split("/", 1)
            message.add_attachment(
                path.read_bytes(),
                maintype=maintype,
                subtype=subtype,
                filename=path.name,
            )
        return message

    def send(self, summary: AuditSummary) -> DeliveryStatus:
        """
        Send the report email if the channel is usable.

        Returns:
            SENT, or SKIPPED when disabled or missing settings.

        Raises:
            EmailDeliveryError: If the SMTP exchange fails.
        """
        if not self.config.configured:
            logger.debug("Email notifications not configured")
            return DeliveryStatus.SKIPPED

        smtp = self.config.smtp
        if not smtp.server:
            logger.warning("No mail transport available (SMTP_SERVER is empty). Email not sent.")
            return DeliveryStatus.SKIPPED

        password = smtp.password.get_secret_value()
        if not password:
            logger.warning("SMTP_PASSWORD not set. Email not sent.")
            return DeliveryStatus.SKIPPED

        message = self.build_message(summary)
        logger.info("Sending email via %s:%s...", smtp.server, smtp.port)
        try:
            with self.smtp_factory(smtp.server, smtp.port, timeout=self.timeout) as client:
                client.starttls()
                client.login(self.config.smtp_user, password)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        return DeliveryStatus.SENT
