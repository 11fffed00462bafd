from typing import Protocol, TextIO

import httpx
import structlog

from costflux.errors import WriteError

logger = structlog.get_logger()

DEFAULT_INFLUX_ORG = "adot"
DEFAULT_INFLUX_BUCKET = "metrics"


class Sink(Protocol):
    """
    Sink receives rendered line protocol records one at a time.
    Any failure to deliver a line aborts the run.
    """

    def emit(self, line: "str") -> "None": ...

    def close(self) -> "None": ...


class StreamSink:
    """
    StreamSink appends newline terminated lines to a text stream,
    either stdout or a result file it owns.
    """

    def __init__(self, stream: "TextIO", owned: "bool" = False) -> "None":
        self._stream = stream
        self._owned = owned

    @classmethod
    def open(cls, path: "str") -> "StreamSink":
        """
        opens (and truncates) the result file at path.
        """
        try:
            stream = open(path, "w", encoding="utf-8")
        except OSError as e:
            raise WriteError(f"failed opening file: {e}", {"path": path}) from e
        return cls(stream, owned=True)

    def emit(self, line: "str") -> "None":
        try:
            self._stream.write(line + "\n")
        except OSError as e:
            raise WriteError(f"failed writing line: {e}") from e

    def close(self) -> "None":
        try:
            if self._owned:
                self._stream.close()
            else:
                self._stream.flush()
        except OSError as e:
            raise WriteError(f"failed closing output: {e}") from e


class InfluxSink:
    """
    InfluxSink submits every line as a single blocking write
    to the InfluxDB v2 HTTP write API.
    """

    def __init__(
        self,
        url: "str",
        token: "str" = "",
        org: "str" = DEFAULT_INFLUX_ORG,
        bucket: "str" = DEFAULT_INFLUX_BUCKET,
        client: "httpx.Client | None" = None,
    ) -> "None":
        self._write_url = f"{url.rstrip('/')}/api/v2/write"
        self._params: "dict[str, str]" = {
            "org": org,
            "bucket": bucket,
            "precision": "ns",
        }
        headers: "dict[str, str]" = {"Content-Type": "text/plain; charset=utf-8"}
        if token:
            headers["Authorization"] = f"Token {token}"
        self._client: "httpx.Client" = client or httpx.Client(
            timeout=10.0,
            headers=headers,
        )

    def emit(self, line: "str") -> "None":
        try:
            resp = self._client.post(
                self._write_url,
                params=self._params,
                content=line.encode("utf-8"),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WriteError(
                "influx rejected line",
                {"status": e.response.status_code, "body": e.response.text},
            ) from e
        except httpx.HTTPError as e:
            raise WriteError(f"influx write failed: {e}") from e

    def close(self) -> "None":
        """
        closes the underlying HTTP client.
        """
        self._client.close()
