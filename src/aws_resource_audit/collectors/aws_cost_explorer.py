"""AWS Cost Explorer collector.

Cost Explorer API charges $0.01 per request.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_resource_audit.collectors.base import (
    CostPeriod,
    CostResult,
    CostSnapshot,
    CostUnavailable,
)

logger = logging.getLogger(__name__)

# Cost Explorer is a global service served from us-east-1
CE_REGION = "us-east-1"

# Error codes meaning "not allowed", as opposed to a transient failure
ACCESS_DENIED_CODES = frozenset(
    {
        "AccessDeniedException",
        "AccessDenied",
        "UnauthorizedOperation",
        "UnrecognizedClientException",
        "OptInRequired",
        "DataUnavailableException",
    }
)


class CostExplorerCollector:
    """
    Estimate recent cost for resources carrying a cost-allocation tag.

    Cost Explorer needs to be enabled for the account and may be restricted by
    IAM or by the support plan; any failure is returned as CostUnavailable.
    """

    collector_name = "cost_explorer"

    def __init__(
        self,
        session: boto3.session.Session | None = None,
        lookback_days: int = 30,
        ce_client: boto3.client | None = None,
    ):
        """
        Initialize the Cost Explorer collector.

        Args:
            session: boto3 session used to create the client.
            lookback_days: Length of the trailing window.
            ce_client: Optional boto3 Cost Explorer client.
        """
        self.session = session
        self.lookback_days = lookback_days
        self._ce_client = ce_client

    @property
    def ce_client(self) -> boto3.client:
        """Get or create Cost Explorer client."""
        if self._ce_client is None:
            session = self.session or boto3.Session()
            self._ce_client = session.client("ce", region_name=CE_REGION)
        return self._ce_client

    def window(self, today: date | None = None) -> tuple[date, date]:
        """Return the trailing window [today - lookback_days, today)."""
        end_date = today or date.today()
        return end_date - timedelta(days=self.lookback_days), end_date

    def estimate(
        self,
        tag_key: str,
        tag_value: str,
        today: date | None = None,
    ) -> CostResult:
        """
        Get monthly unblended cost for resources tagged tag_key=tag_value.

        Args:
            tag_key: Cost-allocation tag key.
            tag_value: Tag value to match.
            today: End of the window (exclusive). Defaults to today.

        Returns:
            CostSnapshot, or CostUnavailable if the query failed.
        """
        start_date, end_date = self.window(today)
        logger.info("Estimating costs for tag %s=%s", tag_key, tag_value)

        request = {
            "TimePeriod": {
                "Start": start_date.isoformat(),
                "End": end_date.isoformat(),
            },
            "Granularity": "MONTHLY",
            "Metrics": ["UnblendedCost"],
            "Filter": {"Tags": {"Key": tag_key, "Values": [tag_value]}},
        }

        periods: list[CostPeriod] = []
        try:
            while True:
                response = self.ce_client.get_cost_and_usage(**request)
                for result in response.get("ResultsByTime", []):
                    periods.append(self._parse_period(result))

                token = response.get("NextPageToken")
                if not token:
                    break
                request["NextPageToken"] = token

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code in ACCESS_DENIED_CODES:
                logger.warning("No permission to query Cost Explorer (%s)", error_code)
                return CostUnavailable(reason="access_denied", message=str(e))
            logger.warning("Error getting cost and usage: %s", e)
            return CostUnavailable(reason="error", message=str(e))
        except BotoCoreError as e:
            logger.warning("Error getting cost and usage: %s", e)
            return CostUnavailable(reason="error", message=str(e))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected Cost Explorer response: %r", e)
            return CostUnavailable(reason="error", message=f"Unexpected response: {e!r}")

        return CostSnapshot(
            start=start_date.isoformat(),
            end=end_date.isoformat(),
            tag_key=tag_key,
            tag_value=tag_value,
            periods=tuple(periods),
        )

    @staticmethod
    def _parse_period(result: dict) -> CostPeriod:
        cost = result["Total"]["UnblendedCost"]
        return CostPeriod(
            start=result["TimePeriod"]["Start"],
            end=result["TimePeriod"]["End"],
            amount=round(float(cost["Amount"]), 2),
            currency=cost.get("Unit", "USD"),
        )
