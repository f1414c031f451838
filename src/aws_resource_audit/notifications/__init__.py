"""Notification integrations for AWS Resource Audit."""

from aws_resource_audit.notifications.summary import AuditSummary, DeliveryStatus
from aws_resource_audit.notifications.slack.webhook import SlackWebhook, SlackWebhookError
from aws_resource_audit.notifications.slack.formatter import SlackFormatter
from aws_resource_audit.notifications.mail import EmailDeliveryError, EmailNotifier
from aws_resource_audit.notifications.dispatcher import NotificationDispatcher

__all__ = [
    "AuditSummary",
    "DeliveryStatus",
    "SlackWebhook",
    "SlackWebhookError",
    "SlackFormatter",
    "EmailDeliveryError",
    "EmailNotifier",
    "NotificationDispatcher",
]
