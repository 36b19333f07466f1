"""The seven fixed reports: pure functions from a frozen store to a Report.

Equal counts are ordered by the dimension value so output is deterministic.
"""

from collections import Counter

from weblog.config import AnalysisConfig
from weblog.models import Report
from weblog.partition_store import PartitionStore

TOTAL_LABEL = "Total Requests:"


def _by_count_desc(counter: Counter) -> list[tuple]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))


def total_requests(store: PartitionStore, config: AnalysisConfig) -> Report:
    return Report("total_requests", ((TOTAL_LABEL, store.count()),))


def status_distribution(store: PartitionStore, config: AnalysisConfig) -> Report:
    # One partition per status, so the partition sizes are the group counts.
    rows = tuple(store.sizes().items())
    return Report("status_distribution", rows)


def top_pages(store: PartitionStore, config: AnalysisConfig) -> Report:
    counter = Counter(r.url for r in store.scan())
    rows = _by_count_desc(counter)[:config.top_pages_limit]
    return Report("top_pages", tuple(rows))


def traffic_sources(store: PartitionStore, config: AnalysisConfig) -> Report:
    counter = Counter(r.user_agent for r in store.scan())
    return Report("traffic_sources", tuple(_by_count_desc(counter)))


def suspicious_ips(store: PartitionStore, config: AnalysisConfig) -> Report:
    """IPs with more than ``suspicious_threshold`` failed requests."""
    counter = Counter(r.ip for r in store.scan(partitions=config.failure_statuses))
    rows = [
        (ip, count) for ip, count in _by_count_desc(counter)
        if count > config.suspicious_threshold
    ]
    return Report("suspicious_ips", tuple(rows))


def traffic_trends(store: PartitionStore, config: AnalysisConfig) -> Report:
    """Requests per minute, keyed by the truncated timestamp string."""
    width = config.minute_truncation_length
    counter = Counter(r.timestamp[:width] for r in store.scan())
    return Report("traffic_trends", tuple(sorted(counter.items())))


def status_404_detail(store: PartitionStore, config: AnalysisConfig) -> Report:
    rows = tuple(r.fields() for r in store.scan(partitions=(config.detail_status,)))
    return Report("status_404_detail", rows)


REPORTS = {
    "total_requests": total_requests,
    "status_distribution": status_distribution,
    "top_pages": top_pages,
    "traffic_sources": traffic_sources,
    "suspicious_ips": suspicious_ips,
    "traffic_trends": traffic_trends,
    "status_404_detail": status_404_detail,
}
