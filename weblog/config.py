"""Configuration: frozen dataclass layered from YAML, env vars, and CLI args."""

import logging
import os
from dataclasses import dataclass, fields, replace

import yaml

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

PARTITION_KEY = "status"

# env var -> (config field, converter)
_ENV_OVERRIDES = {
    "WEBLOG_DELIMITER": ("delimiter", str),
    "WEBLOG_SUSPICIOUS_THRESHOLD": ("suspicious_threshold", int),
    "WEBLOG_TOP_PAGES_LIMIT": ("top_pages_limit", int),
    "WEBLOG_OUTPUT_DIR": ("output_dir", str),
    "WEBLOG_STORE_DIR": ("store_dir", str),
    "WEBLOG_MAX_WORKERS": ("max_workers", int),
    "WEBLOG_LOG_LEVEL": ("log_level", str),
}


@dataclass(frozen=True)
class AnalysisConfig:
    partition_key: str = PARTITION_KEY
    delimiter: str = ","
    suspicious_threshold: int = 3
    top_pages_limit: int = 3
    failure_statuses: tuple = (404, 500)
    minute_truncation_length: int = 16
    detail_status: int = 404
    output_dir: str = "output"
    store_dir: str | None = None
    max_workers: int = 7
    log_level: str = "INFO"

    def __post_init__(self):
        for name in ("partition_key", "delimiter", "output_dir", "log_level"):
            _require_type(name, getattr(self, name), str)
        if self.store_dir is not None:
            _require_type("store_dir", self.store_dir, str)
        for name in ("suspicious_threshold", "top_pages_limit",
                     "minute_truncation_length", "detail_status", "max_workers"):
            _require_int(name, getattr(self, name))
        if not isinstance(self.failure_statuses, (list, tuple, set, frozenset)):
            raise ValueError(
                f"failure_statuses must be a list of status codes, got {self.failure_statuses!r}"
            )
        for status in self.failure_statuses:
            _require_int("failure_statuses", status)

        if self.partition_key != PARTITION_KEY:
            raise ValueError(
                f"partition_key is fixed to {PARTITION_KEY!r}, got {self.partition_key!r}"
            )
        if not self.delimiter:
            raise ValueError("delimiter must not be empty")
        if self.suspicious_threshold < 0:
            raise ValueError("suspicious_threshold must be >= 0")
        if self.top_pages_limit < 1:
            raise ValueError("top_pages_limit must be >= 1")
        if self.minute_truncation_length < 1:
            raise ValueError("minute_truncation_length must be >= 1")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")
        object.__setattr__(self, "log_level", self.log_level.upper())
        object.__setattr__(self, "failure_statuses", tuple(sorted(set(self.failure_statuses))))


def _require_type(name: str, value, expected: type) -> None:
    if not isinstance(value, expected):
        raise ValueError(
            f"{name} must be a {expected.__name__}, got {type(value).__name__} {value!r}"
        )


def _require_int(name: str, value) -> None:
    # bool is an int subclass; YAML `yes` should not pass as a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__} {value!r}")


def load_yaml_config(path: str | None) -> dict:
    """Load the ``analysis`` section of a YAML file. Returns empty dict if no path.

    Raises ValueError if the file is not valid YAML or the section is not a mapping.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    logger.info("Loaded YAML config from %s", path)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    section = data.get("analysis", data) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'analysis' section in {path} must be a mapping")
    return section


def _from_env(environ) -> dict:
    overrides = {}
    for var, (name, convert) in _ENV_OVERRIDES.items():
        if var in environ:
            overrides[name] = convert(environ[var])
    return overrides


def load_config(cli_args=None, yaml_data: dict | None = None, environ=None) -> AnalysisConfig:
    """Build AnalysisConfig: defaults < YAML < env vars < CLI flags.

    CLI flags are read from matching attribute names on *cli_args*; ``None``
    means the flag was not given.
    """
    known = {f.name for f in fields(AnalysisConfig)}
    values = {}

    for key, value in (yaml_data or {}).items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        values[key] = value

    values.update(_from_env(os.environ if environ is None else environ))

    if cli_args is not None:
        for name in known:
            value = getattr(cli_args, name, None)
            if value is not None:
                values[name] = value

    return replace(AnalysisConfig(), **values)
