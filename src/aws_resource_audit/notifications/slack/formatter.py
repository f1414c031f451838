"""Slack Block Kit message formatting."""

from __future__ import annotations

from typing import Any

from aws_resource_audit.notifications.summary import AuditSummary


class SlackFormatter:
    """Format audit messages using Slack Block Kit."""

    HEADER = ":rocket: AWS Resource Audit Completed"

    def summary_text(self, summary: AuditSummary) -> str:
        """Free-text summary used in the message body (mrkdwn)."""
        lines = [
            "AWS Resource Audit completed successfully!",
            f"• Total Resources: {summary.total_resources}",
            f"• Regions: {len(summary.regions)}",
            f"• Services: {len(summary.services)} ({', '.join(summary.services)})",
        ]
        if summary.cost_total is not None:
            lines.append(f"• Tagged cost: {summary.cost_total:.2f} {summary.cost_currency}")
        lines.append(f"• Report: `{summary.report_dir}/`")
        return "\n".join(lines)

    def format_audit_summary(self, summary: AuditSummary) -> dict[str, Any]:
        """
        Format the end-of-run message.

        Args:
            summary: Totals and context of the finished audit.

        Returns:
            Slack Block Kit message payload.
        """
        timestamp = summary.generated_at.strftime("%Y-%m-%d %H:%M:%S")
        text = self.summary_text(summary)

        return {
            # Fallback for notifications and clients without blocks
            "text": f"AWS Resource Audit Completed: {summary.total_resources} resources",
            "blocks": [
                {
                    "type": "header",
                    "text": {
                        "type": "plain_text",
                        "text": self.HEADER,
                        "emoji": True,
                    },
                },
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": text},
                },
                {
                    "type": "section",
                    "fields": [
                        {"type": "mrkdwn", "text": f"*Timestamp:*\n{timestamp}"},
                        {"type": "mrkdwn", "text": f"*Account:*\n{summary.account}"},
                    ],
                },
            ],
        }
