import datetime
from typing import Any, Mapping, Protocol


class CostSource(Protocol):
    """
    CostSource stands as a common protocol for billing APIs
    able to return costs grouped by two dimensions.

    Implementations return the raw list of time-period
    buckets, each holding "Groups" with two "Keys" and
    the cost metric.
    """

    def fetch_grouped_costs(
        self,
        start: "datetime.date",
        end: "datetime.date",
        primary_group_id: "str",
        secondary_group_id: "str",
        filter_expression: "Mapping[str, Any]",
    ) -> "list[dict[str, Any]]": ...

    def close(self) -> "None": ...
