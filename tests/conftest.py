import pytest

from weblog.config import AnalysisConfig
from weblog.models import LogRecord
from weblog.partition_store import PartitionStore


def make_record(ip="1.1.1.1", timestamp="2024-01-01T00:00", url="/a",
                status=200, user_agent="UA1"):
    return LogRecord(ip=ip, timestamp=timestamp, url=url, status=status,
                     user_agent=user_agent)


def build_store(records):
    store = PartitionStore()
    store.extend(records)
    return store.freeze()


@pytest.fixture
def config():
    return AnalysisConfig()


@pytest.fixture
def sample_lines():
    return [
        "10.0.0.1,2024-01-01 10:00:05,/index.html,200,Mozilla/5.0",
        "10.0.0.2,2024-01-01 10:00:40,/login,404,curl/7.68.0",
        "10.0.0.2,2024-01-01 10:01:10,/admin,404,curl/7.68.0",
        "10.0.0.2,2024-01-01 10:01:15,/admin,500,curl/7.68.0",
        "10.0.0.2,2024-01-01 10:01:20,/wp-login,404,curl/7.68.0",
        "10.0.0.3,2024-01-01 10:02:00,/index.html,200,Mozilla/5.0",
        "10.0.0.1,2024-01-01 10:02:30,/docs,301,Mozilla/5.0",
        "10.0.0.4,2024-01-01 10:02:31,/index.html,200,python-requests/2.31.0",
    ]


@pytest.fixture
def sample_store(sample_lines):
    from weblog.reader import LogReader
    return build_store(LogReader().read(sample_lines))


@pytest.fixture
def log_file(tmp_path, sample_lines):
    path = tmp_path / "access.csv"
    path.write_text("\n".join(sample_lines) + "\n")
    return path
