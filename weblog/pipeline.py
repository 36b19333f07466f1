"""End-to-end batch run: ingest -> freeze -> aggregate -> write -> summarize."""

import json
import logging
import os
import threading
import time

from weblog.config import AnalysisConfig
from weblog.engine import AggregationEngine
from weblog.errors import ReportWriteError
from weblog.models import OUTCOME_WRITE_FAILED, RunSummary
from weblog.partition_store import PartitionStore
from weblog.reader import LogReader, expand_paths
from weblog.writer import ReportWriter

logger = logging.getLogger(__name__)


def ingest(paths: list[str], config: AnalysisConfig,
           cancel_event: threading.Event | None = None) -> tuple[PartitionStore, LogReader]:
    """Load every input file into a new store and freeze it.

    Raises FileNotFoundError / OSError if an input cannot be read.
    """
    reader = LogReader(config.delimiter, config.minute_truncation_length, cancel_event)
    store = PartitionStore()
    store.extend(reader.read_files(expand_paths(paths)))
    store.freeze()
    logger.info("Ingested %d record(s) into %d partition(s), %d rejected",
                len(store), len(store.partitions()), reader.malformed_count)
    return store, reader


def load_store(store_dir: str, config: AnalysisConfig,
               cancel_event: threading.Event | None = None) -> tuple[PartitionStore, LogReader]:
    """Rebuild a frozen store from a layout written by ``PartitionStore.save``."""
    reader = LogReader(config.delimiter, config.minute_truncation_length, cancel_event)
    store = PartitionStore.load(store_dir, reader)
    logger.info("Loaded %d record(s) in %d partition(s) from %s",
                len(store), len(store.partitions()), store_dir)
    return store, reader


def run_pipeline(paths: list[str], config: AnalysisConfig, names=None,
                 cancel_event: threading.Event | None = None,
                 from_store: str | None = None) -> RunSummary:
    """Ingest *paths* (or reload *from_store*), run the reports, write them."""
    start = time.monotonic()

    if from_store:
        store, reader = load_store(from_store, config, cancel_event)
    else:
        store, reader = ingest(paths, config, cancel_event)

    if reader.cancelled:
        logger.warning("Ingestion cancelled, partition store not saved")
    elif config.store_dir and not (
            from_store and os.path.abspath(from_store) == os.path.abspath(config.store_dir)):
        store.save(config.store_dir, config.delimiter)

    engine = AggregationEngine(config)
    outcomes = engine.run(store, names, cancel_event)

    writer = ReportWriter(config.output_dir)
    for outcome in outcomes.values():
        if not outcome.ok:
            continue
        try:
            outcome.path = writer.write(outcome.report)
        except ReportWriteError as e:
            logger.warning("Could not write report %s: %s", outcome.name, e)
            outcome.status = OUTCOME_WRITE_FAILED
            outcome.error = str(e)

    summary = RunSummary(
        lines_read=reader.lines_read,
        records_loaded=len(store),
        records_rejected=reader.malformed_count,
        partitions=store.sizes(),
        outcomes=list(outcomes.values()),
        elapsed_seconds=round(time.monotonic() - start, 3),
    )
    logger.info("Run finished in %.3fs: %d report(s) ok, %d failed",
                summary.elapsed_seconds,
                len(summary.outcomes) - len(summary.failed), len(summary.failed))
    return summary


def format_summary_text(summary: RunSummary) -> str:
    """Human-readable run summary."""
    lines = []
    lines.append(f"Lines read:       {summary.lines_read}")
    lines.append(f"Records rejected: {summary.records_rejected}")
    lines.append(f"Records loaded:   {summary.records_loaded}")
    lines.append("")

    lines.append("Partitions:")
    for status, count in summary.partitions.items():
        lines.append(f"  status={status:<5d} {count}")
    lines.append("")

    lines.append("Reports:")
    for o in summary.outcomes:
        if o.ok:
            lines.append(f"  {o.name:20s} {o.row_count} row(s) -> {o.path}")
        else:
            lines.append(f"  {o.name:20s} {o.status.upper()}: {o.error}")

    return "\n".join(lines)


def format_summary_json(summary: RunSummary) -> str:
    return json.dumps({
        "lines_read": summary.lines_read,
        "records_loaded": summary.records_loaded,
        "records_rejected": summary.records_rejected,
        "partitions": {str(k): v for k, v in summary.partitions.items()},
        "reports": [
            {
                "name": o.name,
                "status": o.status,
                "rows": o.row_count,
                "path": o.path,
                "error": o.error,
            }
            for o in summary.outcomes
        ],
        "elapsed_seconds": summary.elapsed_seconds,
    }, indent=2)
