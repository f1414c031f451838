"""Report generation for AWS Resource Audit."""

from aws_resource_audit.reports.builder import (
    ReportContext,
    ReportTotals,
    build_csv_rows,
    build_detailed,
    build_summary,
    build_text_report,
    summarize,
)
from aws_resource_audit.reports.writer import ReportPaths, ReportWriter, report_prefix

__all__ = [
    "ReportContext",
    "ReportTotals",
    "build_csv_rows",
    "build_detailed",
    "build_summary",
    "build_text_report",
    "summarize",
    "ReportPaths",
    "ReportWriter",
    "report_prefix",
]
