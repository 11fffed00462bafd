import enum


class CostfluxError(Exception):
    """
    CostfluxError is the base for every failure that aborts
    an export run.
    """

    def __init__(
        self,
        message: "str",
        details: "dict[str, object] | None" = None,
    ) -> "None":
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigErrorKind(enum.Enum):
    IO_FAILURE = "io_failure"
    PARSE_FAILURE = "parse_failure"


class ConfigError(CostfluxError):
    """
    raised when the configuration document cannot be read
    or does not have the expected shape.
    """

    def __init__(
        self,
        kind: "ConfigErrorKind",
        message: "str",
        details: "dict[str, object] | None" = None,
    ) -> "None":
        super().__init__(message, details)
        self.kind = kind


class FetchError(CostfluxError):
    """
    raised when the billing API call fails or returns
    an unusable response.
    """


class WriteError(CostfluxError):
    """
    raised when a line cannot be delivered to the output.
    """
