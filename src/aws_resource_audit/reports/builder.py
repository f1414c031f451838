"""Build report payloads from collected records and cost data."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from aws_resource_audit.collectors.base import CostResult, CostSnapshot, ResourceRecord

logger = logging.getLogger(__name__)

CSV_HEADER = ("region", "service", "resource_count")
COST_ENTRY_SERVICE = "cost_estimation"


@dataclass(frozen=True)
class ReportTotals:
    regions: int
    services: int
    resources: int


@dataclass(frozen=True)
class ReportContext:
    """Run details shown in the narrative report."""

    generated_at: datetime
    report_dir: str
    prefix: str
    config_source: str | None = None
    cost_tag_key: str = ""
    cost_tag_value: str = ""
    slack_configured: bool = False
    email_configured: bool = False
    email_to: str = ""
    notify: bool = True
    log_file: str = "aws_resource_audit.log"


def normalize_records(records: Iterable[Any] | None) -> list[ResourceRecord]:
    """Drop anything that is not a ResourceRecord; None becomes empty."""
    if records is None:
        return []
    valid = []
    for record in records:
        if isinstance(record, ResourceRecord):
            valid.append(record)
        else:
            logger.warning("Skipping malformed result entry: %r", record)
    return valid


def summarize(records: list[ResourceRecord]) -> ReportTotals:
    return ReportTotals(
        regions=len({r.region for r in records}),
        services=len({r.service for r in records}),
        resources=sum(r.count for r in records),
    )


def build_detailed(records: list[ResourceRecord]) -> list[dict[str, Any]]:
    return [record.to_dict() for record in records]


def build_summary(records: list[ResourceRecord], cost: CostResult) -> list[dict[str, Any]]:
    """
    Reduce records to region/service/count entries.

    A trailing cost entry is appended only when cost data is available.
    """
    summary: list[dict[str, Any]] = [
        {"region": r.region, "service": r.service, "count": r.count} for r in records
    ]
    if isinstance(cost, CostSnapshot):
        summary.append({"service": COST_ENTRY_SERVICE, "data": cost.to_dict()})
    return summary


def build_csv_rows(records: list[ResourceRecord], cost: CostResult) -> list[tuple[str, ...]]:
    rows: list[tuple[str, ...]] = [CSV_HEADER]
    rows.extend((r.region, r.service, str(r.count)) for r in records)
    if isinstance(cost, CostSnapshot):
        rows.extend(
            (p.start, "COST", f"{p.amount:.2f} {p.currency}") for p in cost.periods
        )
    return rows


def _section(title: str) -> list[str]:
    return [title, "─" * len(title)]


def build_text_report(
    records: list[ResourceRecord],
    cost: CostResult,
    context: ReportContext,
) -> str:
    """Render the human-readable summary report."""
    totals = summarize(records)
    generated = context.generated_at.strftime("%Y-%m-%d %H:%M:%S")

    lines = [
        "╔══════════════════════════════════════════════════════════╗",
        "║           AWS RESOURCE AUDIT REPORT                      ║",
        f"║           Generated: {generated:<36}║",
        "╚══════════════════════════════════════════════════════════╝",
        "",
    ]

    lines += _section("EXECUTIVE SUMMARY")
    lines += [
        f"Total Regions: {totals.regions}",
        f"Total Services: {totals.services}",
        f"Total Resources: {totals.resources}",
        "",
    ]

    lines += _section("RESOURCE BREAKDOWN")
    lines += [f"{'Region':<15} {'Service':<10} {'Count':>5}", f"{'─' * 15} {'─' * 10} {'─' * 5}"]
    for r in records:
        lines.append(f"{r.region:<15} {r.service:<10} {r.count:>5}")
    lines.append("")

    if isinstance(cost, CostSnapshot):
        days = (date.fromisoformat(cost.end) - date.fromisoformat(cost.start)).days
        lines += _section(f"COST ESTIMATION (Last {days} Days)")
        lines += [f"Tag Filter: {cost.tag_key} = {cost.tag_value}", ""]
        for p in cost.periods:
            lines.append(f"{p.start} to {p.end}: {p.amount:.2f} {p.currency}")
        lines += [f"Total: {cost.total:.2f} {cost.currency}", ""]

    lines += _section("NOTIFICATIONS")
    suffix = "" if context.notify else " (skipped for this run)"
    if context.slack_configured:
        lines.append(f"✓ Slack: Enabled{suffix}")
    else:
        lines.append("✗ Slack: Not configured")
    if context.email_configured:
        lines.append(f"✓ Email: Enabled (to: {context.email_to}){suffix}")
    else:
        lines.append("✗ Email: Not configured")
    lines.append("")

    lines += _section("GENERATED FILES")
    lines += [f"All reports are saved in: {context.report_dir}/", ""]
    lines.append(f"{'File':<40} Description")
    lines.append(f"{'─' * 40} {'─' * 29}")
    for name, description in (
        (f"{context.prefix}_detailed.json", "Complete audit data (JSON)"),
        (f"{context.prefix}_summary.json", "Summary with cost data (JSON)"),
        (f"{context.prefix}_summary.csv", "Summary with costs (CSV)"),
        (f"{context.prefix}_summary.txt", "This human-readable report"),
        (context.log_file, "Execution log"),
    ):
        lines.append(f"{name:<40} {description}")
    lines.append("")

    lines += _section("CONFIGURATION")
    lines += [
        f"Config file: {context.config_source or 'none (defaults)'}",
        f"Cost tag key: {context.cost_tag_key}",
        f"Cost tag value: {context.cost_tag_value}",
        f"Report directory: {context.report_dir}",
        "",
    ]

    return "\n".join(lines)
