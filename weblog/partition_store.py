"""Status-partitioned record store, in memory with an optional on-disk layout.

On disk, each partition is a Hive-style directory::

    <store_dir>/status=404/000000_0

holding that partition's records as delimited lines.
"""

import logging
import os
import shutil
import tempfile
from typing import Callable, Generator, Iterable

from weblog.errors import StoreFrozenError
from weblog.models import LogRecord

logger = logging.getLogger(__name__)

PARTITION_PREFIX = "status="
DATA_FILE = "000000_0"


class PartitionStore:
    """Mapping of status code -> records in insertion order.

    Written by a single ingesting thread, then frozen and shared read-only.
    """

    def __init__(self):
        self._partitions: dict[int, list[LogRecord]] = {}
        self._frozen = False

    def insert(self, record: LogRecord) -> None:
        if self._frozen:
            raise StoreFrozenError("cannot insert into a frozen partition store")
        partition = self._partitions.get(record.status)
        if partition is None:
            partition = self._partitions[record.status] = []
            logger.debug("Created partition status=%d", record.status)
        partition.append(record)

    def extend(self, records: Iterable[LogRecord]) -> int:
        """Insert every record; return how many were inserted."""
        n = 0
        for record in records:
            self.insert(record)
            n += 1
        return n

    def partitions(self) -> frozenset:
        return frozenset(self._partitions)

    def scan(self, predicate: Callable[[LogRecord], bool] | None = None,
             partitions: Iterable[int] | None = None) -> Generator[LogRecord, None, None]:
        """Yield records, optionally pruned to *partitions* and filtered by *predicate*.

        Partitions are visited in ascending key order; unknown keys are skipped.
        """
        if partitions is None:
            keys = sorted(self._partitions)
        else:
            keys = sorted(k for k in set(partitions) if k in self._partitions)
        for key in keys:
            for record in self._partitions[key]:
                if predicate is None or predicate(record):
                    yield record

    def count(self, partition: int | None = None) -> int:
        if partition is None:
            return sum(len(p) for p in self._partitions.values())
        return len(self._partitions.get(partition, ()))

    def __len__(self) -> int:
        return self.count()

    def sizes(self) -> dict[int, int]:
        """Return {status: record count}, sorted by status."""
        return {k: len(self._partitions[k]) for k in sorted(self._partitions)}

    def freeze(self) -> "PartitionStore":
        """End the ingestion phase. The store is read-only from here on."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- on-disk layout --------------------------------------------------

    def save(self, directory: str, delimiter: str = ",") -> list[str]:
        """Replace *directory* with one partition directory per status.

        The layout is built in a temporary sibling and swapped in whole, so
        partitions from an earlier save never survive and a failed save leaves
        the previous layout in place. Return the data file paths.
        """
        directory = os.path.abspath(directory)
        parent, base = os.path.split(directory)
        os.makedirs(parent, exist_ok=True)
        tmp_dir = tempfile.mkdtemp(dir=parent, prefix=f".{base}.")
        aside = None
        try:
            for key in sorted(self._partitions):
                part_dir = os.path.join(tmp_dir, f"{PARTITION_PREFIX}{key}")
                os.mkdir(part_dir)
                with open(os.path.join(part_dir, DATA_FILE), "w", encoding="utf-8") as f:
                    for record in self._partitions[key]:
                        f.write(delimiter.join(str(v) for v in record.fields()) + "\n")

            if os.path.exists(directory):
                aside = tempfile.mkdtemp(dir=parent, prefix=f".{base}.old.")
                os.rmdir(aside)
                os.replace(directory, aside)
            os.replace(tmp_dir, directory)
            tmp_dir = None
        except Exception:
            if aside is not None and not os.path.exists(directory):
                os.replace(aside, directory)
                aside = None
            raise
        finally:
            if tmp_dir is not None:
                shutil.rmtree(tmp_dir, ignore_errors=True)
            if aside is not None:
                shutil.rmtree(aside, ignore_errors=True)

        written = [
            os.path.join(directory, f"{PARTITION_PREFIX}{key}", DATA_FILE)
            for key in sorted(self._partitions)
        ]
        logger.info("Saved %d partition(s) to %s", len(written), directory)
        return written

    @classmethod
    def load(cls, directory: str, reader) -> "PartitionStore":
        """Rebuild a frozen store from a saved layout, parsing through *reader*.

        Used by ``analyze --from-store`` to rerun reports without the raw logs.
        """
        store = cls()
        if not os.path.isdir(directory):
            raise FileNotFoundError(f"Partition directory not found: {directory}")
        paths = []
        for name in sorted(os.listdir(directory)):
            path = os.path.join(directory, name, DATA_FILE)
            if name.startswith(PARTITION_PREFIX) and os.path.isfile(path):
                paths.append(path)
        store.extend(reader.read_files(paths))
        return store.freeze()
