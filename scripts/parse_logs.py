#!/usr/bin/env python3
"""
CLI script for parsing cloud service logs into structured events.

Reads raw log files (plain or gzip), parses each line with the parser
registered for the log type, and writes the accepted events as NDJSON.

Usage:
    # S3 server access logs from a file
    python scripts/parse_logs.py --log-type AWS.S3ServerAccess --input data/access.log

    # Every log file under a directory, written to a file
    python scripts/parse_logs.py --input data/s3-logs/ --output events.ndjson

    # Fail on the first line that yields no event
    python scripts/parse_logs.py --input data/access.log --strict

    # List available log types
    python scripts/parse_logs.py --list-log-types
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Optional

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cloudlog_pipeline.config import get_settings
from cloudlog_pipeline.parsing import ParseError, ParserNotFoundError, get_registry
from cloudlog_pipeline.pipeline import LogProcessor, ProcessingReport, setup_logging

logger = logging.getLogger(__name__)


def write_events(
    processor: LogProcessor, log_type: str, input_path: Path, out: IO[str]
) -> int:
    """
    Parse input_path and write one JSON object per event.

    Returns:
        Number of events written
    """
    count = 0
    for event in processor.process_path(log_type, input_path):
        out.write(json.dumps(event.to_dict(), sort_keys=True))
        out.write("\n")
        count += 1
    return count


def print_summary(report: Optional[ProcessingReport]) -> None:
    """Print a processing summary to stderr."""
    if report is None:
        return

    print(file=sys.stderr)
    print("Processing Summary", file=sys.stderr)
    print("=" * 50, file=sys.stderr)
    print(f"  Log Type: {report.log_type}", file=sys.stderr)
    print(f"  Files Processed: {report.files_processed:,}", file=sys.stderr)
    if report.files_failed > 0:
        print(f"  Files Failed: {report.files_failed:,}", file=sys.stderr)
    print(f"  Lines Read: {report.lines_read:,}", file=sys.stderr)
    print(f"  Events Emitted: {report.events_emitted:,}", file=sys.stderr)
    if report.lines_dropped > 0:
        print(f"  Lines Dropped: {report.lines_dropped:,}", file=sys.stderr)
    if report.duration_seconds is not None:
        print(f"  Duration: {report.duration_seconds:.1f}s", file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Parse cloud service logs into structured events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # S3 server access logs
  python scripts/parse_logs.py --log-type AWS.S3ServerAccess --input data/access.log

  # Directory of logs to a file
  python scripts/parse_logs.py --input data/s3-logs/ --output events.ndjson

  # List available log types
  python scripts/parse_logs.py --list-log-types
        """,
    )

    parser.add_argument(
        "--log-type",
        type=str,
        help="Log type identifier (default: from settings)",
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        help="Input log file or directory",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output NDJSON file (default: stdout)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on the first line that produces no event",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML config file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--list-log-types",
        action="store_true",
        help="List all available log types and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    settings = get_settings(args.config)
    setup_logging(level=logging.DEBUG if args.verbose else settings.log_level)

    registry = get_registry()

    # List log types if requested
    if args.list_log_types:
        print("Available log types:")
        for log_type in registry.list_log_types():
            description = registry.get_descriptor(log_type).description
            summary = description.split(".")[0] if description else ""
            print(f"  {log_type}: {summary}" if summary else f"  {log_type}")
        return 0

    # Validate arguments
    if args.input is None:
        parser.error("--input is required (unless using --list-log-types)")

    errors = settings.validate()
    if errors:
        for error in errors:
            print(f"Invalid configuration: {error}", file=sys.stderr)
        return 1

    log_type = args.log_type or settings.default_log_type
    processor = LogProcessor(registry=registry, settings=settings, strict=args.strict)

    try:
        # Resolve the log type and input before --output is truncated
        registry.get_descriptor(log_type)
        if not args.input.exists():
            raise FileNotFoundError(f"Path does not exist: {args.input}")

        if args.output:
            with open(args.output, "w", encoding="utf-8") as out:
                write_events(processor, log_type, args.input, out)
        else:
            write_events(processor, log_type, args.input, sys.stdout)
    except ParserNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        print_summary(processor.report)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    print_summary(processor.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
