"""Tests for the seven fixed reports."""

from conftest import build_store, make_record
from weblog.config import AnalysisConfig
from weblog.reports import (
    REPORTS,
    status_404_detail,
    status_distribution,
    suspicious_ips,
    top_pages,
    total_requests,
    traffic_sources,
    traffic_trends,
)


class TestTotalRequests:
    def test_count(self, sample_store, config):
        assert total_requests(sample_store, config).rows == (("Total Requests:", 8),)

    def test_empty_store(self, config):
        assert total_requests(build_store([]), config).rows == (("Total Requests:", 0),)


class TestStatusDistribution:
    def test_ascending_by_status(self, sample_store, config):
        rows = status_distribution(sample_store, config).rows
        assert rows == ((200, 3), (301, 1), (404, 3), (500, 1))

    def test_sum_equals_total(self, sample_store, config):
        total = total_requests(sample_store, config).rows[0][1]
        assert sum(c for _, c in status_distribution(sample_store, config).rows) == total


class TestTopPages:
    def test_top_three_descending(self, sample_store, config):
        rows = top_pages(sample_store, config).rows
        assert len(rows) == 3
        assert rows[0] == ("/index.html", 3)
        assert rows[1] == ("/admin", 2)
        counts = [c for _, c in rows]
        assert counts == sorted(counts, reverse=True)

    def test_ties_broken_lexicographically(self, config):
        store = build_store([make_record(url=u) for u in ("/c", "/b", "/a", "/d")])
        assert top_pages(store, config).rows == (("/a", 1), ("/b", 1), ("/c", 1))

    def test_fewer_than_limit(self, config):
        store = build_store([make_record(url="/only")])
        assert top_pages(store, config).rows == (("/only", 1),)

    def test_custom_limit(self, sample_store):
        rows = top_pages(sample_store, AnalysisConfig(top_pages_limit=1)).rows
        assert rows == (("/index.html", 3),)


class TestTrafficSources:
    def test_all_agents_descending(self, sample_store, config):
        rows = traffic_sources(sample_store, config).rows
        assert rows == (
            ("curl/7.68.0", 4),
            ("Mozilla/5.0", 3),
            ("python-requests/2.31.0", 1),
        )


class TestSuspiciousIps:
    def test_repeated_404s_flag_ip(self, config):
        records = [make_record(status=200)] + [make_record(status=404)] * 4
        store = build_store(records)
        assert suspicious_ips(store, config).rows == (("1.1.1.1", 4),)
        assert total_requests(store, config).rows == (("Total Requests:", 5),)

    def test_threshold_is_strict(self, config):
        store = build_store([make_record(status=404)] * 3)
        assert suspicious_ips(store, config).rows == ()

    def test_boundary_drop_to_three(self, config):
        records = [make_record(status=404)] * 3 + [make_record(status=500)]
        assert suspicious_ips(build_store(records), config).rows == (("1.1.1.1", 4),)
        assert suspicious_ips(build_store(records[:-1]), config).rows == ()

    def test_only_failure_statuses_count(self, config):
        records = [make_record(status=403)] * 10 + [make_record(status=200)] * 10
        assert suspicious_ips(build_store(records), config).rows == ()

    def test_404_and_500_combined(self, sample_store, config):
        assert suspicious_ips(sample_store, config).rows == (("10.0.0.2", 4),)

    def test_ordering(self, config):
        records = ([make_record(ip="b", status=404)] * 5
                   + [make_record(ip="a", status=500)] * 5
                   + [make_record(ip="c", status=404)] * 6)
        rows = suspicious_ips(build_store(records), config).rows
        assert rows == (("c", 6), ("a", 5), ("b", 5))


class TestTrafficTrends:
    def test_per_minute_ascending(self, sample_store, config):
        assert traffic_trends(sample_store, config).rows == (
            ("2024-01-01 10:00", 2),
            ("2024-01-01 10:01", 3),
            ("2024-01-01 10:02", 3),
        )

    def test_iso_timestamps(self, config):
        store = build_store([
            make_record(timestamp="2024-01-01T00:01:59"),
            make_record(timestamp="2024-01-01T00:00:01"),
            make_record(timestamp="2024-01-01T00:01:00"),
        ])
        assert traffic_trends(store, config).rows == (
            ("2024-01-01T00:00", 1),
            ("2024-01-01T00:01", 2),
        )


class TestStatus404Detail:
    def test_full_records_in_insertion_order(self, sample_store, config):
        rows = status_404_detail(sample_store, config).rows
        assert rows == (
            ("10.0.0.2", "2024-01-01 10:00:40", "/login", 404, "curl/7.68.0"),
            ("10.0.0.2", "2024-01-01 10:01:10", "/admin", 404, "curl/7.68.0"),
            ("10.0.0.2", "2024-01-01 10:01:20", "/wp-login", 404, "curl/7.68.0"),
        )

    def test_consistent_with_distribution(self, sample_store, config):
        dist = dict(status_distribution(sample_store, config).rows)
        assert len(status_404_detail(sample_store, config)) == dist[404]

    def test_no_404s(self, config):
        assert status_404_detail(build_store([make_record()]), config).rows == ()


class TestRegistry:
    def test_seven_reports_in_order(self):
        assert list(REPORTS) == [
            "total_requests",
            "status_distribution",
            "top_pages",
            "traffic_sources",
            "suspicious_ips",
            "traffic_trends",
            "status_404_detail",
        ]

    def test_reports_do_not_mutate_store(self, sample_store, config):
        before = sample_store.sizes()
        for fn in REPORTS.values():
            fn(sample_store, config)
        assert sample_store.sizes() == before
