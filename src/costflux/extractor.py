import calendar
import datetime
from typing import Any, Iterable, Mapping

import structlog

from costflux.errors import FetchError
from costflux.models import CostRecord

logger = structlog.get_logger()

COST_METRIC = "UnblendedCost"


def sanitize_key(value: "str") -> "str":
    """
    makes a group key usable as a line protocol tag value:
    spaces become underscores and " - " separators collapse
    to a single underscore.
    """
    cleaned = value.replace(" ", "_")
    # loop so "___-___" style runs end up stable
    while "_-_" in cleaned:
        cleaned = cleaned.replace("_-_", "_")
    return cleaned


def day_to_nanos(day: "datetime.date") -> "str":
    """
    converts a calendar day (UTC midnight) to nanoseconds since epoch.
    """
    return str(calendar.timegm(day.timetuple()) * 1_000_000_000)


def extract(
    results_by_time: "Iterable[Mapping[str, Any]]",
    reference_date: "datetime.date",
) -> "list[CostRecord]":
    """
    flattens the grouped Cost Explorer result buckets into
    CostRecords. All records share the reference day timestamp.
    """
    timestamp = day_to_nanos(reference_date)
    records: "list[CostRecord]" = []

    for period in results_by_time:
        for group in period.get("Groups", []):
            keys = group.get("Keys", [])
            if len(keys) < 2:
                raise FetchError(
                    "billing group has fewer than two keys", {"keys": keys}
                )

            try:
                amount = group["Metrics"][COST_METRIC]["Amount"]
            except (KeyError, TypeError) as e:
                raise FetchError(
                    f"billing group is missing the {COST_METRIC} amount",
                    {"keys": keys},
                ) from e

            records.append(
                CostRecord(
                    primary_key=sanitize_key(keys[0]),
                    secondary_key=sanitize_key(keys[1]),
                    amount=str(amount),
                    timestamp_nanos=timestamp,
                )
            )

    logger.debug("cost_records_extracted", record_count=len(records))
    return records
