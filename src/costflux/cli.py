import argparse
import datetime

from costflux.settings import Settings


def _parse_date(value: "str") -> "datetime.date":
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"invalid date {value!r}, expected YYYY-MM-DD"
        ) from e


def parse_args(argv: "list[str] | None" = None) -> "Settings":
    parser = argparse.ArgumentParser(
        prog="costflux",
        description="AWS daily cost exporter to InfluxDB line protocol",
    )
    parser.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Billed day in format YYYY-MM-DD (default: yesterday)",
    )
    parser.add_argument(
        "--config",
        dest="config_file",
        default="",
        help="Accounts configuration file",
    )
    parser.add_argument(
        "--result",
        dest="result_path",
        default="",
        help="Result file (default: stdout)",
    )
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Only emit accounts present in the configuration file",
    )
    parser.add_argument(
        "--aws.region",
        dest="aws_region",
        default=None,
        help="AWS region (default: AWS_REGION or eu-west-1)",
    )
    parser.add_argument(
        "--aws.key-id",
        dest="aws_access_key_id",
        default=None,
        help="AWS key ID (default: AWS_ACCESS_KEY_ID)",
    )
    parser.add_argument(
        "--aws.secret",
        dest="aws_secret_access_key",
        default=None,
        help="AWS secret key (default: AWS_SECRET_ACCESS_KEY)",
    )
    parser.add_argument(
        "--influx.url",
        dest="influx_url",
        default=None,
        help="InfluxDB url, enables InfluxDB output (default: INFLUX_URL)",
    )
    parser.add_argument(
        "--influx.token",
        dest="influx_token",
        default=None,
        help="InfluxDB token (default: INFLUX_TOKEN)",
    )
    parser.add_argument(
        "--influx.org",
        dest="influx_org",
        default=None,
        help="InfluxDB organization (default: adot)",
    )
    parser.add_argument(
        "--influx.bucket",
        dest="influx_bucket",
        default=None,
        help="InfluxDB bucket (default: metrics)",
    )
    parser.add_argument(
        "--metrics.textfile",
        dest="metrics_textfile",
        default="",
        help="Write run metrics to this Prometheus textfile",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )

    args = parser.parse_args(argv)
    if args.exact and not args.config_file:
        parser.error("--exact requires --config")

    settings = Settings.from_env()
    if args.date is not None:
        settings.date = args.date
    settings.config_file = args.config_file
    settings.result_path = args.result_path
    settings.exact = args.exact
    settings.metrics_textfile = args.metrics_textfile
    settings.log_level = args.log_level

    # flags win over the environment only when given
    for name in (
        "aws_region",
        "aws_access_key_id",
        "aws_secret_access_key",
        "influx_url",
        "influx_token",
        "influx_org",
        "influx_bucket",
    ):
        value = getattr(args, name)
        if value is not None:
            setattr(settings, name, value)

    return settings
