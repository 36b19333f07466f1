"""weblog-reports: run the fixed access-log reports over delimited log files."""

import logging
import signal
import sys
import threading
from argparse import ArgumentParser

from weblog.config import LOG_LEVELS, load_config, load_yaml_config
from weblog.generator import write_sample
from weblog.pipeline import format_summary_json, format_summary_text, run_pipeline
from weblog.reports import REPORTS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REPORT_FAILED = 1
EXIT_INPUT_ERROR = 2


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="weblog-reports",
        description="Partition an access log by status and run the fixed reports.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Ingest log files and write all reports")
    analyze.add_argument("inputs", nargs="*",
                         help="Log file path(s), directories, or glob pattern(s)")
    analyze.add_argument("--from-store", default=None,
                         help="Rerun reports from a partition store saved with --store-dir")
    analyze.add_argument("--config", default=None, help="Path to YAML config file")
    analyze.add_argument("--output-dir", default=None,
                         help="Directory receiving one sub-directory per report")
    analyze.add_argument("--store-dir", default=None,
                         help="Also save the partitioned store under this directory")
    analyze.add_argument("--reports", nargs="+", choices=list(REPORTS), default=None,
                         help="Run only these reports (default: all)")
    analyze.add_argument("--workers", dest="max_workers", type=int, default=None,
                         help="Report thread pool size")
    analyze.add_argument("--summary", choices=["text", "json"], default="text",
                         help="Summary format (default: text)")
    analyze.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None)

    generate = sub.add_parser("generate", help="Write a sample access log")
    generate.add_argument("path", help="Destination file")
    generate.add_argument("--count", type=int, default=1000)
    generate.add_argument("--seed", type=int, default=0)
    generate.add_argument("--malformed-ratio", type=float, default=0.0)
    return parser


def _analyze(args) -> int:
    if bool(args.inputs) == bool(args.from_store):
        print("Error: provide either input files or --from-store", file=sys.stderr)
        return EXIT_INPUT_ERROR
    try:
        config = load_config(args, load_yaml_config(args.config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    logging.getLogger().setLevel(config.log_level)

    cancel_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, cancelling...", signum)
        cancel_event.set()

    previous = {
        signum: signal.signal(signum, handle_signal)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        summary = run_pipeline(args.inputs, config, args.reports, cancel_event,
                               from_store=args.from_store)
    except OSError as e:
        logger.error("Input error: %s", e)
        return EXIT_INPUT_ERROR
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    if args.summary == "json":
        print(format_summary_json(summary))
    else:
        print(format_summary_text(summary))
    return EXIT_REPORT_FAILED if summary.failed else EXIT_OK


def _generate(args) -> int:
    n = write_sample(args.path, args.count, args.seed, args.malformed_ratio)
    logger.info("Wrote %d line(s) to %s", n, args.path)
    return EXIT_OK


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.command == "generate":
        return _generate(args)
    return _analyze(args)


if __name__ == "__main__":
    sys.exit(main())
