import datetime
import os
from dataclasses import dataclass, field

from costflux.billing.aws import DEFAULT_REGION
from costflux.sink import DEFAULT_INFLUX_BUCKET, DEFAULT_INFLUX_ORG


def yesterday() -> "datetime.date":
    return datetime.date.today() - datetime.timedelta(days=1)


@dataclass
class Settings:
    # billed day to export
    date: "datetime.date" = field(default_factory=yesterday)
    config_file: "str" = ""
    # result file, empty means stdout
    result_path: "str" = ""
    # only emit accounts present in the config file
    exact: "bool" = False
    log_level: "str" = "info"
    # node exporter textfile for run metrics, empty disables it
    metrics_textfile: "str" = ""

    aws_region: "str" = DEFAULT_REGION
    aws_access_key_id: "str" = ""
    aws_secret_access_key: "str" = ""

    influx_url: "str" = ""
    influx_token: "str" = ""
    influx_org: "str" = DEFAULT_INFLUX_ORG
    influx_bucket: "str" = DEFAULT_INFLUX_BUCKET

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            aws_region=os.environ.get("AWS_REGION", DEFAULT_REGION),
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", ""),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", ""),
            influx_url=os.environ.get("INFLUX_URL", ""),
            influx_token=os.environ.get("INFLUX_TOKEN", ""),
        )

    @property
    def influx_enabled(self) -> "bool":
        return bool(self.influx_url)
