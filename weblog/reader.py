"""Generator-based log reading, delimited-line parsing, and path expansion."""

import glob
import logging
import os
import threading
from typing import Generator, Iterable

from weblog.errors import MalformedRecord
from weblog.models import LogRecord

logger = logging.getLogger(__name__)

FIELD_COUNT = 5
MAX_ERROR_SAMPLES = 20


def parse_line(line: str, delimiter: str = ",", min_timestamp_length: int = 16,
               line_number: int = 0) -> LogRecord:
    """Parse one ``ip,timestamp,url,status,user_agent`` line.

    Raises MalformedRecord on undecodable bytes (surrogate-escaped by
    ``read_files``), a wrong field count, a status that is not plain ASCII
    digits, or a timestamp too short to truncate to minute granularity.
    """
    stripped = line.rstrip("\r\n")
    try:
        stripped.encode("utf-8")
    except UnicodeEncodeError:
        raise MalformedRecord("line is not valid UTF-8", stripped, line_number) from None

    parts = stripped.split(delimiter)
    if len(parts) != FIELD_COUNT:
        raise MalformedRecord(
            f"expected {FIELD_COUNT} fields, got {len(parts)}", stripped, line_number
        )

    ip, timestamp, url, status_str, user_agent = parts
    if not (status_str.isascii() and status_str.isdigit()):
        raise MalformedRecord(
            f"status {status_str!r} is not an integer", stripped, line_number
        )
    status = int(status_str)

    if len(timestamp) < min_timestamp_length:
        raise MalformedRecord(
            f"timestamp {timestamp!r} shorter than {min_timestamp_length} characters",
            stripped, line_number,
        )

    return LogRecord(ip=ip, timestamp=timestamp, url=url, status=status,
                     user_agent=user_agent)


class LogReader:
    """Single forward pass over input lines, counting what it rejects."""

    def __init__(self, delimiter: str = ",", min_timestamp_length: int = 16,
                 cancel_event: threading.Event | None = None):
        self._delimiter = delimiter
        self._min_timestamp_length = min_timestamp_length
        self._cancel_event = cancel_event
        self.lines_read = 0
        self.records_read = 0
        self.malformed_count = 0
        self.error_samples: list[MalformedRecord] = []

    @property
    def cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def read(self, lines: Iterable[str]) -> Generator[LogRecord, None, None]:
        """Yield a LogRecord for every parseable line; skip blank lines."""
        for line in lines:
            if self.cancelled:
                logger.info("Read cancelled after %d lines", self.lines_read)
                return
            self.lines_read += 1
            if not line.strip():
                continue
            try:
                record = parse_line(line, self._delimiter,
                                    self._min_timestamp_length, self.lines_read)
            except MalformedRecord as e:
                self._reject(e)
                continue
            self.records_read += 1
            yield record

    def read_files(self, paths: list[str]) -> Generator[LogRecord, None, None]:
        """Yield records from multiple files, sequentially."""
        for path in paths:
            logger.info("Reading %s", path)
            with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
                yield from self.read(f)
            if self.cancelled:
                return

    def _reject(self, error: MalformedRecord) -> None:
        self.malformed_count += 1
        if len(self.error_samples) < MAX_ERROR_SAMPLES:
            self.error_samples.append(error)
        logger.warning("Skipping malformed record: %s", error)


def expand_paths(raw_paths: list[str]) -> list[str]:
    """Expand globs and directories, deduplicate, and validate that files exist.

    A directory contributes every regular, non-hidden file directly inside it.
    Raises FileNotFoundError if a literal path doesn't exist or nothing matches.
    """
    expanded = []
    seen = set()

    def _add(path: str) -> None:
        if path not in seen:
            seen.add(path)
            expanded.append(path)

    for raw in raw_paths:
        if any(c in raw for c in ("*", "?", "[")):
            for m in sorted(glob.glob(raw)):
                if os.path.isfile(m):
                    _add(m)
        elif os.path.isdir(raw):
            for name in sorted(os.listdir(raw)):
                path = os.path.join(raw, name)
                if not name.startswith(".") and os.path.isfile(path):
                    _add(path)
        elif os.path.isfile(raw):
            _add(raw)
        else:
            raise FileNotFoundError(f"File not found: {raw}")

    if not expanded:
        raise FileNotFoundError("No log files found matching the given paths")

    return expanded
