import datetime
from typing import Any, Mapping

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from costflux.errors import FetchError
from costflux.extractor import COST_METRIC

logger = structlog.get_logger()

DEFAULT_REGION = "eu-west-1"


class CostExplorerSource:
    """
    CostExplorerSource implements the CostSource protocol on top of
    the AWS Cost Explorer GetCostAndUsage API, with daily granularity
    and a single unblended cost metric.
    """

    def __init__(
        self,
        region: "str" = DEFAULT_REGION,
        access_key_id: "str" = "",
        secret_access_key: "str" = "",
        client: "Any" = None,
    ) -> "None":
        if client is None:
            # empty credentials fall back to boto3's default chain
            try:
                client = boto3.client(
                    "ce",
                    region_name=region,
                    aws_access_key_id=access_key_id or None,
                    aws_secret_access_key=secret_access_key or None,
                )
            except BotoCoreError as e:
                raise FetchError(
                    "failed to create Cost Explorer client", {"error": str(e)}
                ) from e
        self._client = client

    def close(self) -> "None":
        self._client.close()

    def fetch_grouped_costs(
        self,
        start: "datetime.date",
        end: "datetime.date",
        primary_group_id: "str",
        secondary_group_id: "str",
        filter_expression: "Mapping[str, Any]",
    ) -> "list[dict[str, Any]]":
        """
        fetches the grouped costs for [start, end), following
        pagination until every bucket has been collected.
        """
        params: "dict[str, Any]" = {
            "TimePeriod": {"Start": start.isoformat(), "End": end.isoformat()},
            "Granularity": "DAILY",
            "Metrics": [COST_METRIC],
            "GroupBy": [
                {"Type": "DIMENSION", "Key": primary_group_id},
                {"Type": "DIMENSION", "Key": secondary_group_id},
            ],
        }
        if filter_expression:
            params["Filter"] = dict(filter_expression)

        results: "list[dict[str, Any]]" = []
        next_token = ""

        while True:
            if next_token:
                params["NextPageToken"] = next_token

            logger.debug(
                "cost_explorer_fetch",
                start=params["TimePeriod"]["Start"],
                end=params["TimePeriod"]["End"],
                filter_present="Filter" in params,
                page=bool(next_token),
            )
            try:
                resp = self._client.get_cost_and_usage(**params)
            except ClientError as e:
                raise FetchError(
                    "failed to do request",
                    {
                        "code": e.response.get("Error", {}).get("Code", "Unknown"),
                        "error": str(e),
                    },
                ) from e
            except BotoCoreError as e:
                raise FetchError("failed to do request", {"error": str(e)}) from e

            results.extend(resp.get("ResultsByTime", []))

            next_token = resp.get("NextPageToken", "")
            if not next_token:
                break

        logger.debug(
            "cost_explorer_fetch_done",
            buckets=len(results),
            groups=sum(len(r.get("Groups", [])) for r in results),
        )
        return results
