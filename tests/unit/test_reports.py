"""Tests for report generation."""

import csv
import json
import logging
from dataclasses import replace
from datetime import datetime

import pytest

from aws_resource_audit.collectors.base import CostUnavailable
from aws_resource_audit.reports.builder import (
    CSV_HEADER,
    ReportContext,
    build_csv_rows,
    build_summary,
    build_text_report,
    summarize,
)
from aws_resource_audit.reports.writer import ReportWriter, atomic_write_text, report_prefix

PREFIX = "aws_audit_20240601_120000"


@pytest.fixture
def context(tmp_path):
    return ReportContext(
        generated_at=datetime(2024, 6, 1, 12, 0, 5),
        report_dir=str(tmp_path / "reports"),
        prefix=PREFIX,
        config_source="config/config.env",
        cost_tag_key="Environment",
        cost_tag_value="Production",
        slack_configured=True,
        email_configured=False,
    )


class TestBuilders:
    """Tests for the report payload builders."""

    def test_summarize(self, sample_records):
        """Test totals over distinct regions and services."""
        totals = summarize(sample_records)
        assert totals.regions == 2
        assert totals.services == 2
        assert totals.resources == 3

    def test_summary_with_cost(self, sample_records, sample_cost_snapshot):
        """Test the cost entry is appended when cost data exists."""
        summary = build_summary(sample_records, sample_cost_snapshot)

        assert summary[0] == {"region": "us-east-1", "service": "ec2", "count": 2}
        assert len(summary) == 4
        assert summary[-1]["service"] == "cost_estimation"
        assert summary[-1]["data"]["total"] == 123.46

    def test_summary_without_cost(self, sample_records):
        """Test no cost entry when cost data is unavailable."""
        summary = build_summary(sample_records, CostUnavailable(reason="access_denied"))

        assert len(summary) == 3
        assert all(entry["service"] != "cost_estimation" for entry in summary)

    def test_csv_rows(self, sample_records, sample_cost_snapshot):
        """Test CSV rows with the cost rows appended."""
        rows = build_csv_rows(sample_records, sample_cost_snapshot)

        assert rows[0] == CSV_HEADER
        assert rows[1:4] == [
            ("us-east-1", "ec2", "2"),
            ("us-east-1", "s3", "0"),
            ("us-west-2", "ec2", "1"),
        ]
        assert rows[4] == ("2024-05-02", "COST", "123.46 USD")

    def test_text_report(self, sample_records, sample_cost_snapshot, context):
        """Test the narrative report sections."""
        text = build_text_report(sample_records, sample_cost_snapshot, context)

        assert "Generated: 2024-06-01 12:00:05" in text
        assert "Total Regions: 2" in text
        assert "Total Resources: 3" in text
        assert "COST ESTIMATION (Last 30 Days)" in text
        assert "Tag Filter: Environment = Production" in text
        assert "Total: 123.46 USD" in text
        assert "✓ Slack: Enabled" in text
        assert "✗ Email: Not configured" in text
        assert f"{PREFIX}_summary.csv" in text
        assert "Config file: config/config.env" in text

    def test_text_report_without_cost(self, sample_records, context):
        """Test the cost section is omitted when unavailable."""
        text = build_text_report(sample_records, CostUnavailable(reason="disabled"), context)

        assert "COST ESTIMATION" not in text

    def test_text_report_notifications_skipped(self, sample_records, context):
        """Test configured channels are marked as skipped for --no-notify runs."""
        text = build_text_report(
            sample_records, CostUnavailable(reason="disabled"), replace(context, notify=False)
        )

        assert "✓ Slack: Enabled (skipped for this run)" in text


class TestReportWriter:
    """Tests for ReportWriter."""

    def test_report_prefix(self):
        """Test the shared run prefix."""
        assert report_prefix(datetime(2024, 6, 1, 12, 0, 0)) == PREFIX

    def test_writes_all_reports(self, tmp_path, sample_records, sample_cost_snapshot, context):
        """Test the four reports are written under one prefix."""
        writer = ReportWriter(tmp_path / "reports", PREFIX)

        paths = writer.write(sample_records, sample_cost_snapshot, context)

        assert [p.name for p in paths] == [
            f"{PREFIX}_detailed.json",
            f"{PREFIX}_summary.json",
            f"{PREFIX}_summary.csv",
            f"{PREFIX}_summary.txt",
        ]
        assert all(p.is_file() for p in paths)

        detailed = json.loads(paths.detailed_json.read_text())
        assert len(detailed) == 3
        assert all(entry["resource_count"] == len(entry["resources"]) for entry in detailed)

        summary = json.loads(paths.summary_json.read_text())
        assert summary[-1]["service"] == "cost_estimation"

        with paths.summary_csv.open(newline="") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == list(CSV_HEADER)
        assert rows[-1] == ["2024-05-02", "COST", "123.46 USD"]

        assert "EXECUTIVE SUMMARY" in paths.summary_txt.read_text(encoding="utf-8")

    def test_no_records(self, tmp_path, context, caplog):
        """Test missing results produce empty reports instead of failing."""
        writer = ReportWriter(tmp_path / "reports", PREFIX)

        with caplog.at_level(logging.WARNING):
            paths = writer.write(None, CostUnavailable(reason="disabled"), context)

        assert json.loads(paths.detailed_json.read_text()) == []
        assert json.loads(paths.summary_json.read_text()) == []
        assert paths.summary_csv.read_text() == "region,service,resource_count\n"
        assert "Total Resources: 0" in paths.summary_txt.read_text(encoding="utf-8")
        assert "No valid results data" in caplog.text

    def test_malformed_entries_skipped(self, tmp_path, sample_records, context):
        """Test entries that are not records are dropped."""
        writer = ReportWriter(tmp_path / "reports", PREFIX)

        paths = writer.write(
            [sample_records[0], {"region": "us-east-1"}, None], CostUnavailable(reason="disabled"), context
        )

        assert len(json.loads(paths.detailed_json.read_text())) == 1

    def test_write_raw(self, tmp_path):
        """Test raw side files are named per service and region."""
        writer = ReportWriter(tmp_path / "reports", PREFIX)

        path = writer.write_raw("ec2", "us-east-1", "raw output\n")

        assert path == tmp_path / "reports" / "ec2_us-east-1_raw.table"
        assert path.read_text() == "raw output\n"

    def test_atomic_write_leaves_no_temp_files(self, tmp_path):
        """Test only the final file remains after a write."""
        target = tmp_path / "report.json"

        atomic_write_text(target, "[]\n")
        atomic_write_text(target, "[1]\n")

        assert target.read_text() == "[1]\n"
        assert [p.name for p in tmp_path.iterdir()] == ["report.json"]
