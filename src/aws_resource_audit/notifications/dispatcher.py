"""Send the end-of-run notifications on every enabled channel."""

from __future__ import annotations

import logging

from aws_resource_audit.config.logging import SUCCESS
from aws_resource_audit.config.schema import AuditConfig
from aws_resource_audit.notifications.mail import EmailDeliveryError, EmailNotifier
from aws_resource_audit.notifications.slack.formatter import SlackFormatter
from aws_resource_audit.notifications.slack.webhook import SlackWebhook, SlackWebhookError
from aws_resource_audit.notifications.summary import AuditSummary, DeliveryStatus

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Deliver the audit summary to Slack and email.

    Each channel is independent and best-effort: a failure is logged as a
    warning and never changes the outcome of the audit.
    """

    def __init__(
        self,
        config: AuditConfig,
        enabled: bool = True,
        slack_webhook: SlackWebhook | None = None,
        email_notifier: EmailNotifier | None = None,
        formatter: SlackFormatter | None = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Audit configuration.
            enabled: False for --no-notify; no channel is attempted.
            slack_webhook: Optional webhook sender. Built from config if None.
            email_notifier: Optional email notifier. Built from config if None.
            formatter: Optional Slack formatter.
        """
        self.config = config
        self.enabled = enabled
        self._slack_webhook = slack_webhook
        self.email_notifier = email_notifier or EmailNotifier(config.email)
        self.formatter = formatter or SlackFormatter()

    @property
    def slack_webhook(self) -> SlackWebhook | None:
        if self._slack_webhook is None and self.config.slack.configured:
            self._slack_webhook = SlackWebhook(self.config.slack.webhook_url)
        return self._slack_webhook

    def dispatch(self, summary: AuditSummary) -> dict[str, DeliveryStatus]:
        """
        Notify every enabled channel.

        Returns:
            Delivery status per channel ("slack", "email").
        """
        if not self.enabled:
            logger.info("Notifications disabled for this run")
            return {"slack": DeliveryStatus.SKIPPED, "email": DeliveryStatus.SKIPPED}

        return {
            "slack": self._send_slack(summary),
            "email": self._send_email(summary),
        }

    def _send_slack(self, summary: AuditSummary) -> DeliveryStatus:
        webhook = self.slack_webhook
        if webhook is None:
            logger.debug("Slack webhook not configured")
            return DeliveryStatus.SKIPPED

        try:
            webhook.send(self.formatter.format_audit_summary(summary))
        except SlackWebhookError as e:
            logger.warning("Failed to send Slack notification: %s", e)
            return DeliveryStatus.FAILED

        logger.log(SUCCESS, "Slack notification sent")
        return DeliveryStatus.SENT

    def _send_email(self, summary: AuditSummary) -> DeliveryStatus:
        try:
            status = self.email_notifier.send(summary)
        except EmailDeliveryError as e:
            logger.warning("%s", e)
            return DeliveryStatus.FAILED

        if status is DeliveryStatus.SENT:
            logger.log(SUCCESS, "Email sent successfully to %s", self.config.email.to)
        return status
