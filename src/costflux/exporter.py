import datetime
import time

import structlog

from costflux.billing.base import CostSource
from costflux.config import Config
from costflux.extractor import extract
from costflux.lineprotocol import enrichment_enabled, serialize
from costflux.metrics import (
    OUTCOME_ENRICHED,
    OUTCOME_PLAIN,
    OUTCOME_SUPPRESSED,
    RunMetrics,
)
from costflux.models import Found
from costflux.resolver import resolve
from costflux.sink import Sink

logger = structlog.get_logger()


class Exporter:
    """
    Exporter runs one export for a single billed day: it fetches
    the grouped costs, enriches every record with the configured
    account metadata and hands the rendered lines to the sink.
    Any failure propagates and ends the run.
    """

    def __init__(
        self,
        config: "Config",
        source: "CostSource",
        sink: "Sink",
        metrics: "RunMetrics",
        exact: "bool" = False,
    ) -> "None":
        self._config = config
        self._source = source
        self._sink = sink
        self._metrics = metrics
        self._exact = exact

    def run(self, day: "datetime.date") -> "int":
        """
        exports the costs of day and returns the number
        of lines written.
        """
        started = time.monotonic()
        end = day + datetime.timedelta(days=1)
        logger.info("export_start", date=day.isoformat(), exact=self._exact)

        results = self._source.fetch_grouped_costs(
            day,
            end,
            self._config.primary.group_id,
            self._config.secondary.group_id,
            self._config.filter,
        )
        records = extract(results, day)
        logger.info("cost_fetch_done", record_count=len(records))

        written = 0
        for record in records:
            resolution = resolve(self._config, record.secondary_key)
            line = serialize(record, resolution, self._config, self._exact)

            if line is None:
                logger.debug("line_suppressed", account=record.secondary_key)
                self._metrics.inc_record(OUTCOME_SUPPRESSED)
                continue

            self._sink.emit(line)
            written += 1
            self._metrics.inc_lines_written()
            enriched = enrichment_enabled(self._config) and isinstance(
                resolution, Found
            )
            self._metrics.inc_record(OUTCOME_ENRICHED if enriched else OUTCOME_PLAIN)

        self._metrics.set_run_duration(time.monotonic() - started)
        self._metrics.set_last_success(time.time())
        logger.info(
            "export_done",
            lines_written=written,
            suppressed=len(records) - written,
        )
        return written
