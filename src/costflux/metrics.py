from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    write_to_textfile,
)

# outcomes of a single cost record
OUTCOME_ENRICHED = "enriched"
OUTCOME_PLAIN = "plain"
OUTCOME_SUPPRESSED = "suppressed"


class RunMetrics:
    """
    tracks what an export run did. Runs are one-shot, so the
    registry is meant to be written to a node exporter textfile
    rather than scraped.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._registry: "CollectorRegistry" = registry
        self._records: "Counter" = Counter(
            "costflux_records_total",
            "Cost records processed by outcome",
            ["outcome"],
            registry=registry,
        )
        self._lines_written: "Counter" = Counter(
            "costflux_lines_written_total",
            "Line protocol records delivered to the output",
            registry=registry,
        )
        self._run_duration: "Gauge" = Gauge(
            "costflux_run_duration_seconds",
            "Duration of the last export run",
            registry=registry,
        )
        self._last_success: "Gauge" = Gauge(
            "costflux_last_success_timestamp_seconds",
            "Unix timestamp of the last successful export run",
            registry=registry,
        )

    def inc_record(self, outcome: "str") -> "None":
        self._records.labels(outcome=outcome).inc()

    def inc_lines_written(self) -> "None":
        self._lines_written.inc()

    def set_run_duration(self, duration_seconds: "float") -> "None":
        self._run_duration.set(duration_seconds)

    def set_last_success(self, timestamp: "float") -> "None":
        self._last_success.set(timestamp)

    def write_textfile(self, path: "str") -> "None":
        """
        writes the registry in the Prometheus text format,
        atomically replacing path.
        """
        write_to_textfile(path, self._registry)
