"""Slack webhook notification sender."""

from __future__ import annotations

import json
from typing import Any
from urllib import error, request


class SlackWebhookError(Exception):
    """Error sending Slack webhook."""

    pass


class SlackWebhook:
    """Send messages to a Slack incoming webhook."""

    def __init__(self, webhook_url: str, timeout: float = 10):
        """
        Initialize the Slack webhook sender.

        Args:
            webhook_url: Incoming webhook URL (https://hooks.slack.com/services/...).
            timeout: Request timeout in seconds.
        """
        if not webhook_url:
            raise SlackWebhookError("Slack webhook URL is not configured")
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, message: dict[str, Any]) -> bool:
        """
        Send a message to Slack.

        Args:
            message: Slack Block Kit message payload.

        Returns:
            True if message was sent successfully.

        Raises:
            SlackWebhookError: If the message fails to send.
        """
        try:
            data = json.dumps(message).encode("utf-8")

            req = request.Request(
                self.webhook_url,
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            with request.urlopen(req, timeout=self.timeout) as response:
                response_body = response.read().decode("utf-8")

                if response.status != 200 or response_body != "ok":
                    raise SlackWebhookError(
                        f"Slack API error: {response.status} - {response_body}"
                    )

            return True

        except SlackWebhookError:
            raise
        except error.HTTPError as e:
            raise SlackWebhookError(f"HTTP error sending to Slack: {e.code} - {e.reason}")
        except error.URLError as e:
            raise SlackWebhookError(f"URL error sending to Slack: {e.reason}")
        except Exception as e:
            raise SlackWebhookError(f"Error sending to Slack: {e}")
