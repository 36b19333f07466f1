"""Aggregation engine: runs reports concurrently over a frozen store.

One thread-pool task per report. A failing report is recorded in its own
outcome and never affects the others.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable

from weblog.config import AnalysisConfig
from weblog.errors import AggregationError
from weblog.models import (
    OUTCOME_CANCELLED,
    OUTCOME_FAILED,
    Report,
    ReportOutcome,
)
from weblog.partition_store import PartitionStore
from weblog.reports import REPORTS

logger = logging.getLogger(__name__)


class AggregationEngine:
    def __init__(self, config: AnalysisConfig, reports: dict | None = None):
        self._config = config
        self._reports = dict(REPORTS if reports is None else reports)

    @property
    def report_names(self) -> list[str]:
        return list(self._reports)

    def compute(self, name: str, store: PartitionStore) -> Report:
        """Run a single report synchronously.

        Raises:
            AggregationError: the store is not frozen or the report failed.
        """
        if not store.frozen:
            raise AggregationError(name, "partition store must be frozen before aggregation")
        try:
            return self._reports[name](store, self._config)
        except AggregationError:
            raise
        except Exception as e:
            raise AggregationError(name, f"{type(e).__name__}: {e}") from e

    def run(self, store: PartitionStore, names: Iterable[str] | None = None,
            cancel_event: threading.Event | None = None) -> dict[str, ReportOutcome]:
        """Compute the requested reports in parallel.

        Returns {name: ReportOutcome} in report-registry order.
        """
        selected = self._select(names)
        if not store.frozen:
            raise AggregationError("*", "partition store must be frozen before aggregation")

        outcomes: dict[str, ReportOutcome] = {}
        workers = min(self._config.max_workers, len(selected)) or 1

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="report") as executor:
            futures = {
                executor.submit(self._run_one, name, store, cancel_event): name
                for name in selected
            }
            for future in as_completed(futures):
                name = futures[future]
                outcomes[name] = future.result()

        return {name: outcomes[name] for name in selected}

    def _run_one(self, name: str, store: PartitionStore,
                 cancel_event: threading.Event | None) -> ReportOutcome:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Report %s cancelled before start", name)
            return ReportOutcome(name, status=OUTCOME_CANCELLED, error="cancelled")
        try:
            report = self.compute(name, store)
        except AggregationError as e:
            logger.warning("Report %s failed: %s", name, e)
            return ReportOutcome(name, status=OUTCOME_FAILED, error=str(e))
        logger.info("Report %s computed: %d row(s)", name, len(report))
        return ReportOutcome(name, report=report)

    def _select(self, names: Iterable[str] | None) -> list[str]:
        if names is None:
            return list(self._reports)
        wanted = list(dict.fromkeys(names))
        unknown = [n for n in wanted if n not in self._reports]
        if unknown:
            raise ValueError(f"Unknown report(s): {', '.join(unknown)}")
        return [n for n in self._reports if n in wanted]
