"""Slack notification integration."""

from aws_resource_audit.notifications.slack.webhook import SlackWebhook, SlackWebhookError
from aws_resource_audit.notifications.slack.formatter import SlackFormatter

__all__ = ["SlackWebhook", "SlackWebhookError", "SlackFormatter"]
