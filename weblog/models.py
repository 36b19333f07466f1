"""Data models: frozen dataclasses for records and reports, plus run results."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LogRecord:
    ip: str
    timestamp: str
    url: str
    status: int
    user_agent: str

    def fields(self) -> tuple:
        """Return the five values in input column order."""
        return (self.ip, self.timestamp, self.url, self.status, self.user_agent)


@dataclass(frozen=True)
class Report:
    name: str
    rows: tuple = ()

    def __len__(self) -> int:
        return len(self.rows)


OUTCOME_OK = "ok"
OUTCOME_FAILED = "failed"
OUTCOME_WRITE_FAILED = "write_failed"
OUTCOME_CANCELLED = "cancelled"


@dataclass
class ReportOutcome:
    name: str
    status: str = OUTCOME_OK
    report: Report | None = None
    error: str | None = None
    path: str | None = None

    @property
    def row_count(self) -> int:
        return len(self.report) if self.report is not None else 0

    @property
    def ok(self) -> bool:
        return self.status == OUTCOME_OK


@dataclass
class RunSummary:
    lines_read: int = 0
    records_loaded: int = 0
    records_rejected: int = 0
    partitions: dict[int, int] = field(default_factory=dict)
    outcomes: list[ReportOutcome] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> list[ReportOutcome]:
        return [o for o in self.outcomes if not o.ok]
