import sys
import time

import structlog
from prometheus_client import CollectorRegistry

from costflux.billing.aws import CostExplorerSource
from costflux.cli import parse_args
from costflux.config import Config, load_config
from costflux.errors import CostfluxError
from costflux.exporter import Exporter
from costflux.logging import setup_logging
from costflux.metrics import RunMetrics
from costflux.settings import Settings
from costflux.sink import InfluxSink, Sink, StreamSink

logger = structlog.get_logger()


def _build_sink(settings: "Settings") -> "Sink":
    if settings.influx_enabled:
        logger.info("output_selected", output="influx", url=settings.influx_url)
        return InfluxSink(
            url=settings.influx_url,
            token=settings.influx_token,
            org=settings.influx_org,
            bucket=settings.influx_bucket,
        )

    if settings.result_path:
        logger.info("output_selected", output="file", path=settings.result_path)
        return StreamSink.open(settings.result_path)

    return StreamSink(sys.stdout)


def run(settings: "Settings", metrics: "RunMetrics") -> "int":
    """
    performs one export with the given settings and returns
    the number of lines written.
    """
    config = load_config(settings.config_file) if settings.config_file else Config()

    source = CostExplorerSource(
        region=settings.aws_region,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )
    try:
        sink = _build_sink(settings)
        try:
            exporter = Exporter(config, source, sink, metrics, exact=settings.exact)
            return exporter.run(settings.date)
        finally:
            sink.close()
    finally:
        source.close()


def main() -> "None":
    settings = parse_args()
    setup_logging(settings.log_level)

    metrics = RunMetrics(registry=CollectorRegistry())
    started = time.monotonic()
    try:
        run(settings, metrics)
    except CostfluxError as e:
        metrics.set_run_duration(time.monotonic() - started)
        logger.error("export_failed", error=e.message, details=e.details)
        raise SystemExit(f"costflux: {e.message}") from e
    finally:
        if settings.metrics_textfile:
            metrics.write_textfile(settings.metrics_textfile)
            logger.debug("metrics_textfile_written", path=settings.metrics_textfile)


if __name__ == "__main__":
    main()
