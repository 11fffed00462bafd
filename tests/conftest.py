import json
from typing import Callable

import pytest
from prometheus_client import CollectorRegistry

from costflux.config import Config, parse_config
from costflux.models import CostRecord


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture()
def write_config(tmp_path: "object") -> "Callable[[object], str]":
    """
    writes a JSON document to a temporary config file
    and returns its path.
    """

    def _write(document: "object") -> "str":
        path = tmp_path / "config.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture()
def team_config() -> "Config":
    return parse_config(
        {"accounts": [{"name": "Team A", "id": "111", "tags": {"env": "prod"}}]}
    )


@pytest.fixture()
def ec2_record() -> "CostRecord":
    return CostRecord(
        primary_key="EC2",
        secondary_key="111",
        amount="12.50",
        timestamp_nanos="1700000000000000000",
    )
