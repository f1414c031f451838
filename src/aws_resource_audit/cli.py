"""Command line interface for AWS Resource Audit."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from aws_resource_audit import __version__
from aws_resource_audit.config import load_config
from aws_resource_audit.config.logging import attach_run_log, configure_logging
from aws_resource_audit.exceptions import AuditError, ExitCode, UsageError
from aws_resource_audit.models import AuditRequest, ServiceTag, parse_region, parse_services
from aws_resource_audit.validation import check_credentials, check_dependencies

logger = logging.getLogger(__name__)

EPILOG = f"""
Supported services:
{chr(10).join(f"  {tag.value:<8}{tag.description}" for tag in ServiceTag)}

Examples:
  aws-resource-audit us-east-1 ec2,s3
  aws-resource-audit all ec2,s3,lambda --verbose
  aws-resource-audit us-west-2 rds --dry-run
  aws-resource-audit all ec2 --no-notify --no-cost

Configuration is read from .env, config/.env, config/config.env.local or
config/config.env (first found), overridden by environment variables.
"""


class AuditArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments as a UsageError."""

    def error(self, message: str):
        raise UsageError(message, remediation=f"Run '{self.prog} --help' for usage.")


def build_parser() -> AuditArgumentParser:
    parser = AuditArgumentParser(
        prog="aws-resource-audit",
        description="Inventory AWS resources across regions and report on them.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("region", help="AWS region id (e.g. us-east-1) or 'all'")
    parser.add_argument("services", help="Comma-separated services (e.g. ec2,s3,lambda)")
    parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be queried without calling AWS"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--no-notify", dest="notify", action="store_false", help="Skip Slack and email notifications"
    )
    parser.add_argument(
        "--no-cost", dest="estimate_cost", action="store_false", help="Skip cost estimation"
    )
    parser.add_argument(
        "--test", dest="test_mode", action="store_true", help="Use sample data instead of AWS"
    )
    parser.add_argument("--config", dest="config_path", type=Path, help="Path to a config env file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: list[str] | None = None) -> AuditRequest:
    """
    Parse command line arguments into an AuditRequest.

    Raises:
        UsageError: For missing or malformed arguments.
        UnsupportedServiceError: For an unknown service name.
    """
    args = build_parser().parse_args(argv)
    return AuditRequest(
        region=parse_region(args.region),
        services=parse_services(args.services),
        dry_run=args.dry_run,
        verbose=args.verbose,
        notify=args.notify,
        estimate_cost=args.estimate_cost,
        test_mode=args.test_mode,
        config_path=args.config_path,
    )


def print_banner(request: AuditRequest) -> None:
    print("╔════════════════════════════════════════════════════════╗")
    print(f"║  AWS Resource Audit v{__version__:<34}║")
    print("╚════════════════════════════════════════════════════════╝")
    print(f"Region: {request.region}")
    print(f"Services: {', '.join(request.service_names)}")
    if request.test_mode:
        print("Mode: TEST (sample data, no AWS calls)")


def run(request: AuditRequest) -> int:
    """Validate the environment and run the audit for a parsed request."""
    started_at = datetime.now()
    configure_logging(request.verbose)

    config = load_config(request.config_path)
    log_path = attach_run_log(config.reports.log_file)
    logger.info("Starting AWS Resource Audit (log: %s)", log_path or "console only")
    print_banner(request)

    versions = check_dependencies()
    logger.debug("Dependencies: %s", ", ".join(f"{k} {v}" for k, v in versions.items()))

    # These import the AWS SDK, so they wait until the dependency check passes
    import boto3

    from aws_resource_audit.audit import AuditRunner
    from aws_resource_audit.collectors.regions import resolve_regions
    from aws_resource_audit.collectors.sample import resolve_sample_regions

    session = None
    identity = None
    if request.test_mode:
        regions = resolve_sample_regions(request.region)
    else:
        session = boto3.Session()
        identity = check_credentials(session)
        logger.info("AWS credentials valid (account %s)", identity.account)
        regions = resolve_regions(request.region, session)
    logger.debug("Regions to audit: %s", ", ".join(regions))

    runner = AuditRunner(
        request,
        config,
        session=session,
        identity=identity,
        started_at=started_at,
    )
    if request.dry_run:
        runner.preview(runner.plan(regions))
        return ExitCode.SUCCESS

    try:
        runner.run(regions)
    except OSError as e:
        logger.error("Failed to write reports to %s: %s", config.reports.report_dir, e)
        return ExitCode.RUNTIME
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """CLI entry point used by ``aws-resource-audit`` and ``python -m aws_resource_audit``."""
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        build_parser().print_help()
        return ExitCode.USAGE

    try:
        return run(parse_args(argv))
    except AuditError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.remediation:
            print(e.remediation, file=sys.stderr)
        logger.debug("Aborted with exit code %d", e.exit_code)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nAudit interrupted", file=sys.stderr)
        return ExitCode.INTERRUPTED


__all__ = ["main", "parse_args", "build_parser"]
