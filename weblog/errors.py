"""Error taxonomy for ingestion, aggregation, and report output."""


class MalformedRecord(ValueError):
    """A single input line could not be parsed into a LogRecord."""

    def __init__(self, reason: str, line: str = "", line_number: int = 0):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        super().__init__(f"line {line_number}: {reason}")


class AggregationError(RuntimeError):
    """A report could not be computed."""

    def __init__(self, report: str, message: str):
        self.report = report
        super().__init__(f"{report}: {message}")


class ReportWriteError(OSError):
    """Writing a report's output failed; the destination was left untouched."""

    def __init__(self, report: str, message: str):
        self.report = report
        super().__init__(f"{report}: {message}")


class StoreFrozenError(RuntimeError):
    """Raised on insert after the partition store has been frozen."""
