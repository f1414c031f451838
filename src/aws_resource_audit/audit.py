"""
Audit pipeline.

Drives the region x service collection loop, then cost estimation, report
generation and notifications, strictly in sequence:

    parsing-args -> validating -> (dry-run-preview | collecting)
        -> estimating-cost -> reporting -> notifying -> done
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import boto3

from aws_resource_audit.collectors.aws_cost_explorer import CostExplorerCollector
from aws_resource_audit.collectors.base import (
    CollectionResult,
    CostResult,
    CostSnapshot,
    CostUnavailable,
    ResourceCollector,
    ResourceRecord,
)
from aws_resource_audit.collectors.resources import get_collector
from aws_resource_audit.collectors.sample import (
    SAMPLE_ACCOUNT_ID,
    SampleCostExplorer,
    SampleResourceCollector,
)
from aws_resource_audit.config.logging import SUCCESS
from aws_resource_audit.config.schema import AuditConfig
from aws_resource_audit.models import AuditRequest, ServiceTag
from aws_resource_audit.notifications.dispatcher import NotificationDispatcher
from aws_resource_audit.notifications.summary import AuditSummary, DeliveryStatus
from aws_resource_audit.reports.builder import ReportContext
from aws_resource_audit.reports.writer import ReportPaths, ReportWriter, report_prefix
from aws_resource_audit.validation import CallerIdentity

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    PARSING_ARGS = "parsing-args"
    VALIDATING = "validating"
    DRY_RUN_PREVIEW = "dry-run-preview"
    COLLECTING = "collecting"
    ESTIMATING_COST = "estimating-cost"
    REPORTING = "reporting"
    NOTIFYING = "notifying"
    DONE = "done"


@dataclass(frozen=True)
class AuditPlan:
    """Every (region, service) enumeration call a run will make."""

    regions: tuple[str, ...]
    services: tuple[ServiceTag, ...]

    @property
    def calls(self) -> list[tuple[str, ServiceTag]]:
        return [(region, service) for region in self.regions for service in self.services]

    @property
    def total_calls(self) -> int:
        return len(self.regions) * len(self.services)


@dataclass
class AuditOutcome:
    """Everything a completed run produced."""

    plan: AuditPlan
    results: list[CollectionResult] = field(default_factory=list)
    cost: CostResult = field(default_factory=lambda: CostUnavailable(reason="disabled"))
    report_paths: ReportPaths | None = None
    notifications: dict[str, DeliveryStatus] = field(default_factory=dict)

    @property
    def records(self) -> list[ResourceRecord]:
        return [result.record for result in self.results]

    @property
    def total_resources(self) -> int:
        return sum(record.count for record in self.records)


class AuditRunner:
    """Run one audit request against AWS (or the sample data source)."""

    def __init__(
        self,
        request: AuditRequest,
        config: AuditConfig,
        session: boto3.session.Session | None = None,
        identity: CallerIdentity | None = None,
        started_at: datetime | None = None,
        collector_factory: Callable[[ServiceTag], ResourceCollector] | None = None,
        cost_explorer: CostExplorerCollector | SampleCostExplorer | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ):
        """
        Initialize the runner.

        Args:
            request: Parsed command line request.
            config: Loaded configuration.
            session: boto3 session; unused in test mode.
            identity: Caller identity from credential validation.
            started_at: Run start time; fixes the report prefix.
            collector_factory: Optional override mapping a tag to a collector.
            cost_explorer: Optional cost estimator override.
            dispatcher: Optional notification dispatcher override.
        """
        self.request = request
        self.config = config
        self.session = session
        self.identity = identity
        self.started_at = started_at or datetime.now()
        self.prefix = report_prefix(self.started_at)
        self.writer = ReportWriter(config.reports.report_dir, self.prefix)
        self.state = RunState.VALIDATING

        if collector_factory is None:
            collector_factory = SampleResourceCollector if request.test_mode else self._aws_collector
        self.collector_factory = collector_factory

        if cost_explorer is None:
            if request.test_mode:
                cost_explorer = SampleCostExplorer(lookback_days=config.cost.lookback_days)
            else:
                cost_explorer = CostExplorerCollector(
                    session=session, lookback_days=config.cost.lookback_days
                )
        self.cost_explorer = cost_explorer

        self.dispatcher = dispatcher or NotificationDispatcher(
            config, enabled=request.notify and not request.test_mode
        )

    def _aws_collector(self, service: ServiceTag) -> ResourceCollector:
        return get_collector(service, self.session)

    def _enter(self, state: RunState) -> None:
        logger.debug("State: %s -> %s", self.state.value, state.value)
        self.state = state

    @property
    def account(self) -> str:
        if self.request.test_mode:
            return SAMPLE_ACCOUNT_ID
        return self.identity.account if self.identity else "unknown"

    def plan(self, regions: list[str]) -> AuditPlan:
        return AuditPlan(regions=tuple(regions), services=self.request.services)

    def preview(self, plan: AuditPlan) -> AuditPlan:
        """Print what a real run would call, without calling anything."""
        self._enter(RunState.DRY_RUN_PREVIEW)
        print()
        print("🚀 DRY RUN - No API calls will be made")
        print("──────────────────────────────────────")
        print("Would query:")
        for region in plan.regions:
            print(f"  🌍 Region: {region}")
            for service in plan.services:
                print(f"    • {service.value}")
        print()
        print(f"Total API calls: {plan.total_calls}")
        print()
        if self.request.estimate_cost:
            cost = self.config.cost
            print(f"Would estimate costs for tag: {cost.tag_key}={cost.tag_value}")
        if self.request.notify and not self.request.test_mode:
            print("Would send notifications")
        print()
        self._enter(RunState.DONE)
        return plan

    def collect(self, plan: AuditPlan) -> list[CollectionResult]:
        """Enumerate every (region, service) pair, one call at a time."""
        self._enter(RunState.COLLECTING)
        self.writer.ensure_dir()

        collectors = {service: self.collector_factory(service) for service in plan.services}
        results: list[CollectionResult] = []
        total = plan.total_calls

        print()
        print("🔍 Scanning AWS resources...")
        print("────────────────────────────")
        for region in plan.regions:
            print(f"\n🌍 Region: {region}")
            for service in plan.services:
                step = len(results) + 1
                result = collectors[service].collect(region)
                raw_path = self.writer.write_raw(service.value, region, result.raw)

                if result.degraded:
                    logger.warning(
                        "%s in %s %s: %s (raw output: %s)",
                        service.value,
                        region,
                        result.status.value,
                        result.error,
                        raw_path.name,
                    )
                    print(f"  [{step}/{total}] {service.value}: ✗ no data ({result.status.value})")
                elif result.record.count:
                    print(f"  [{step}/{total}] {service.value}: ✓ {result.record.count} resources")
                else:
                    print(f"  [{step}/{total}] {service.value}: 0 resources")

                results.append(result)
        return results

    def estimate_cost(self) -> CostResult:
        self._enter(RunState.ESTIMATING_COST)
        if not self.request.estimate_cost:
            return CostUnavailable(reason="disabled")

        print()
        print("💰 Estimating costs...")
        print("──────────────────────")
        cost = self.cost_explorer.estimate(self.config.cost.tag_key, self.config.cost.tag_value)
        if isinstance(cost, CostSnapshot):
            print(f"✓ Cost estimation completed: {cost.total:.2f} {cost.currency}")
        else:
            print("✗ Cost Explorer not available or insufficient permissions")
        return cost

    def report_context(self) -> ReportContext:
        config = self.config
        return ReportContext(
            generated_at=datetime.now(),
            report_dir=str(self.writer.report_dir),
            prefix=self.prefix,
            config_source=config.source,
            cost_tag_key=config.cost.tag_key,
            cost_tag_value=config.cost.tag_value,
            slack_configured=config.slack.configured,
            email_configured=config.email.configured,
            email_to=config.email.to,
            notify=self.request.notify and not self.request.test_mode,
            log_file=config.reports.log_file,
        )

    def write_reports(self, records: list[ResourceRecord], cost: CostResult) -> ReportPaths:
        self._enter(RunState.REPORTING)
        print()
        print("📊 Generating reports...")
        print("───────────────────────")
        return self.writer.write(records, cost, self.report_context())

    def notify(self, outcome: AuditOutcome) -> dict[str, DeliveryStatus]:
        self._enter(RunState.NOTIFYING)
        paths = outcome.report_paths
        cost = outcome.cost
        summary = AuditSummary(
            total_resources=outcome.total_resources,
            regions=list(outcome.plan.regions),
            services=[service.value for service in outcome.plan.services],
            report_dir=str(self.writer.report_dir),
            account=self.account,
            generated_at=datetime.now(),
            narrative_report=paths.summary_txt if paths else None,
            attachments=[paths.summary_csv, paths.summary_txt] if paths else [],
            cost_total=cost.total if isinstance(cost, CostSnapshot) else None,
            cost_currency=cost.currency if isinstance(cost, CostSnapshot) else "USD",
        )

        if self.dispatcher.enabled:
            print()
            print("🔔 Sending notifications...")
            print("──────────────────────────")
        return self.dispatcher.dispatch(summary)

    def run(self, regions: list[str]) -> AuditOutcome:
        """Collect, estimate, report and notify for the given regions."""
        plan = self.plan(regions)
        outcome = AuditOutcome(plan=plan)

        outcome.results = self.collect(plan)
        outcome.cost = self.estimate_cost()
        outcome.report_paths = self.write_reports(outcome.records, outcome.cost)
        outcome.notifications = self.notify(outcome)

        self._enter(RunState.DONE)
        self._print_summary(outcome)
        logger.log(SUCCESS, "Audit completed. Found %d resources.", outcome.total_resources)
        return outcome

    def _print_summary(self, outcome: AuditOutcome) -> None:
        print()
        print("✅ AWS Resource Audit Completed Successfully!")
        print("────────────────────────────────────────────────────────")
        print(f"Total regions scanned: {len(outcome.plan.regions)}")
        print(f"Total services queried: {len(outcome.plan.services)}")
        print(f"Total resources found: {outcome.total_resources}")
        print(f"Total API calls made: {outcome.plan.total_calls}")
        print()
        print(f"📁 Reports saved to: {self.writer.report_dir}/")
        for path in outcome.report_paths or ():
            print(f"  • {path.name}")
        print()
