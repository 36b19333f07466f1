"""Produces sample access-log CSV lines: ip,timestamp,url,status,user_agent."""

import os
import random
from datetime import datetime, timedelta

IP_POOL = [
    "192.168.1.1", "10.0.0.42", "172.16.0.5", "203.0.113.7",
    "198.51.100.23", "192.0.2.88", "10.10.10.10", "172.31.255.1",
]

PATH_POOL = [
    "/", "/index.html", "/api/users", "/api/orders", "/api/products",
    "/login", "/logout", "/dashboard", "/static/app.js", "/docs",
]

# Weighted status distribution: mostly 2xx, some 404/500 so suspicious IPs appear
STATUS_POOL = [200, 200, 200, 200, 201, 301, 302, 403, 404, 404, 500]

USER_AGENT_POOL = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7)",
    "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Firefox/115.0",
    "curl/7.68.0",
    "python-requests/2.31.0",
]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_MALFORMED_POOL = [
    "10.0.0.1,2024-01-01 00:00:00,/missing-status",
    "10.0.0.1,2024-01-01 00:00:00,/,abc,curl/7.68.0",
    "garbage line without delimiters",
]


def generate_line(rng: random.Random, when: datetime) -> str:
    """Return a single well-formed CSV access-log line."""
    return ",".join([
        rng.choice(IP_POOL),
        when.strftime(TIMESTAMP_FORMAT),
        rng.choice(PATH_POOL),
        str(rng.choice(STATUS_POOL)),
        rng.choice(USER_AGENT_POOL),
    ])


def generate_lines(count: int, seed: int = 0, start: datetime | None = None,
                   malformed_ratio: float = 0.0) -> list[str]:
    """Generate *count* lines with timestamps advancing 0-20s each step."""
    rng = random.Random(seed)
    when = start or datetime(2024, 1, 1)
    lines = []
    for _ in range(count):
        if malformed_ratio and rng.random() < malformed_ratio:
            lines.append(rng.choice(_MALFORMED_POOL))
            continue
        lines.append(generate_line(rng, when))
        when += timedelta(seconds=rng.randint(0, 20))
    return lines


def write_sample(path: str, count: int, seed: int = 0,
                 malformed_ratio: float = 0.0) -> int:
    """Write a sample log file. Return the number of lines written."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    lines = generate_lines(count, seed=seed, malformed_ratio=malformed_ratio)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    return len(lines)
