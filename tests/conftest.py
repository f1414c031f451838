"""Pytest configuration and fixtures."""

import logging
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from aws_resource_audit.collectors.base import CostPeriod, CostSnapshot, ResourceRecord
from aws_resource_audit.config.loader import ENV_MAPPINGS
from aws_resource_audit.config.logging import LOGGER_NAME
from aws_resource_audit.config.schema import AuditConfig, ReportConfig


class FakeSession:
    """
    Stand-in for boto3.Session.

    Hands out one MagicMock client per (service, region). Paginators return
    the pages registered with set_pages.
    """

    def __init__(self, region_name="us-east-1"):
        self.region_name = region_name
        self.clients = {}
        self.paginators = {}
        self._pages = {}

    def set_pages(self, service, method, pages, region=None):
        """Register paginator pages, optionally for one region only."""
        self._pages[(service, method, region)] = pages

    def client(self, service_name, region_name=None, **kwargs):
        key = (service_name, region_name)
        if key not in self.clients:
            client = MagicMock(name=f"{service_name}:{region_name}")
            client.get_paginator.side_effect = (
                lambda method, key=key: self._paginator(key[0], key[1], method)
            )
            self.clients[key] = client
        return self.clients[key]

    def _paginator(self, service, region, method):
        pages = self._pages.get(
            (service, method, region), self._pages.get((service, method, None), [])
        )
        paginator = MagicMock(name=f"{service}.{method}")
        paginator.paginate.return_value = list(pages)
        self.paginators[(service, region, method)] = paginator
        return paginator

    @property
    def services_called(self):
        return sorted({service for service, _ in self.clients})


@pytest.fixture
def fake_session():
    """Fake boto3 session with a valid caller identity."""
    session = FakeSession()
    session.client("sts").get_caller_identity.return_value = {
        "Account": "123456789012",
        "Arn": "arn:aws:iam::123456789012:user/auditor",
        "UserId": "AIDAEXAMPLE",
    }
    return session


@pytest.fixture
def make_client_error():
    """Build a botocore ClientError with the given error code."""

    def _make(code, operation="GetCostAndUsage"):
        return ClientError({"Error": {"Code": code, "Message": f"{code} message"}}, operation)

    return _make


@pytest.fixture
def audit_config(tmp_path):
    """Default configuration writing into a temporary directory."""
    return AuditConfig(
        reports=ReportConfig(
            report_dir=str(tmp_path / "reports"),
            log_file=str(tmp_path / "aws_resource_audit.log"),
        )
    )


@pytest.fixture
def audit_env(tmp_path, monkeypatch):
    """
    Isolated environment for CLI runs.

    No config file is found, and reports and the run log go to tmp_path.
    """
    for key in ENV_MAPPINGS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("AUDIT_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("REPORT_DIR", str(tmp_path / "reports"))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "aws_resource_audit.log"))
    return tmp_path


@pytest.fixture
def sample_records():
    """Records for two regions and two services."""
    return [
        ResourceRecord(region="us-east-1", service="ec2", resources=("i-0abc", "i-0def")),
        ResourceRecord(region="us-east-1", service="s3", resources=()),
        ResourceRecord(region="us-west-2", service="ec2", resources=("i-0123",)),
    ]


@pytest.fixture
def sample_cost_snapshot():
    """Cost for a 30 day window spanning two months."""
    return CostSnapshot(
        start="2024-05-02",
        end="2024-06-01",
        tag_key="Environment",
        tag_value="Production",
        periods=(
            CostPeriod(start="2024-05-02", end="2024-06-01", amount=123.46, currency="USD"),
        ),
    )


@pytest.fixture(autouse=True)
def reset_audit_logger():
    """Drop handlers added by configure_logging / attach_run_log."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
