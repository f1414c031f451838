"""Write report artifacts to the report directory."""

from __future__ import annotations

import csv
import io
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from aws_resource_audit.collectors.base import CostResult
from aws_resource_audit.config.logging import SUCCESS
from aws_resource_audit.reports.builder import (
    ReportContext,
    build_csv_rows,
    build_detailed,
    build_summary,
    build_text_report,
    normalize_records,
)

logger = logging.getLogger(__name__)


def report_prefix(timestamp: datetime) -> str:
    """Shared filename prefix for every artifact of one run."""
    return f"aws_audit_{timestamp.strftime('%Y%m%d_%H%M%S')}"


def atomic_write_text(path: Path, content: str) -> None:
    """Write content to a temp file beside path, then rename over it."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


@dataclass(frozen=True)
class ReportPaths:
    detailed_json: Path
    summary_json: Path
    summary_csv: Path
    summary_txt: Path

    def __iter__(self):
        return iter((self.detailed_json, self.summary_json, self.summary_csv, self.summary_txt))


class ReportWriter:
    """Write the four report artifacts under one timestamped prefix."""

    def __init__(self, report_dir: str | Path, prefix: str):
        self.report_dir = Path(report_dir)
        self.prefix = prefix

    @property
    def paths(self) -> ReportPaths:
        base = self.report_dir
        return ReportPaths(
            detailed_json=base / f"{self.prefix}_detailed.json",
            summary_json=base / f"{self.prefix}_summary.json",
            summary_csv=base / f"{self.prefix}_summary.csv",
            summary_txt=base / f"{self.prefix}_summary.txt",
        )

    def ensure_dir(self) -> Path:
        self.report_dir.mkdir(parents=True, exist_ok=True)
        return self.report_dir

    def write_raw(self, service: str, region: str, raw: str) -> Path:
        """Save a raw API response for debugging."""
        path = self.ensure_dir() / f"{service}_{region}_raw.table"
        path.write_text(raw, encoding="utf-8")
        return path

    def write(
        self,
        records: Iterable[Any] | None,
        cost: CostResult,
        context: ReportContext,
    ) -> ReportPaths:
        """
        Write detailed JSON, summary JSON, summary CSV and summary text.

        Args:
            records: Collected ResourceRecords. None or malformed entries
                degrade to an empty report instead of failing.
            cost: CostSnapshot or CostUnavailable.
            context: Run details for the narrative report.

        Returns:
            ReportPaths of the written files.
        """
        self.ensure_dir()
        valid = normalize_records(records)
        if not valid:
            logger.warning("No valid results data to generate reports")

        paths = self.paths
        atomic_write_text(paths.detailed_json, json.dumps(build_detailed(valid), indent=2) + "\n")
        atomic_write_text(paths.summary_json, json.dumps(build_summary(valid, cost), indent=2) + "\n")

        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerows(build_csv_rows(valid, cost))
        atomic_write_text(paths.summary_csv, buffer.getvalue())

        atomic_write_text(paths.summary_txt, build_text_report(valid, cost, context))

        logger.log(SUCCESS, "All reports generated successfully")
        return paths
