"""Report output: one isolated directory per report, swapped in atomically.

Layout mirrors Hive's INSERT OVERWRITE DIRECTORY::

    <output_dir>/<report_name>/000000_0
"""

import logging
import os
import shutil
import tempfile
from typing import TextIO

from weblog.errors import ReportWriteError
from weblog.models import Report

logger = logging.getLogger(__name__)

DATA_FILE = "000000_0"


def format_row(row: tuple) -> str:
    """Join string-cast values with single spaces."""
    return " ".join(str(v) for v in row)


def write_report(report: Report, stream: TextIO) -> int:
    """Write every row of *report* as one line. Return lines written."""
    n = 0
    for row in report.rows:
        stream.write(format_row(row) + "\n")
        n += 1
    return n


class ReportWriter:
    def __init__(self, output_dir: str):
        self._output_dir = output_dir

    def destination(self, name: str) -> str:
        return os.path.join(self._output_dir, name)

    def write(self, report: Report) -> str:
        """Write *report* and return its data file path.

        All-or-nothing: on failure any previous output for this report is
        left in place and ReportWriteError is raised.
        """
        dest = self.destination(report.name)
        tmp_dir = None
        aside = None
        try:
            os.makedirs(self._output_dir, exist_ok=True)
            tmp_dir = tempfile.mkdtemp(dir=self._output_dir, prefix=f".{report.name}.")
            with open(os.path.join(tmp_dir, DATA_FILE), "w", encoding="utf-8") as f:
                write_report(report, f)

            if os.path.exists(dest):
                aside = tempfile.mkdtemp(dir=self._output_dir, prefix=f".{report.name}.old.")
                os.rmdir(aside)
                os.replace(dest, aside)
            os.replace(tmp_dir, dest)
            tmp_dir = None
        except OSError as e:
            if aside is not None and not os.path.exists(dest):
                os.replace(aside, dest)
                aside = None
            raise ReportWriteError(report.name, str(e)) from e
        finally:
            if tmp_dir is not None:
                shutil.rmtree(tmp_dir, ignore_errors=True)
            if aside is not None:
                shutil.rmtree(aside, ignore_errors=True)

        path = os.path.join(dest, DATA_FILE)
        logger.info("Wrote %d row(s) to %s", len(report), path)
        return path
