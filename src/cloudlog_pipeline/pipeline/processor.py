"""
Line-oriented log processor.

Dispatches raw lines to the parser registered for a log type and collects
statistics about what was emitted and what was dropped. Batching,
retrieval and delivery of the resulting events belong to the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from ..config.settings import Settings, get_settings
from ..parsing.exceptions import ParseError
from ..parsing.registry import ParserRegistry, get_registry
from .file_utils import find_log_files, open_file_auto_decompress

logger = logging.getLogger(__name__)


@dataclass
class ProcessingReport:
    """Statistics for one processing run."""

    log_type: str
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None
    files_processed: int = 0
    files_failed: int = 0
    lines_read: int = 0
    lines_blank: int = 0
    lines_dropped: int = 0
    events_emitted: int = 0
    duration_seconds: Optional[float] = None

    def finish(self, started: float) -> None:
        """Record the end of the run."""
        self.end_time = datetime.now(timezone.utc)
        self.duration_seconds = round(time.monotonic() - started, 3)

    def to_dict(self) -> dict:
        """Convert report to dictionary."""
        return {
            "log_type": self.log_type,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "lines_read": self.lines_read,
            "lines_blank": self.lines_blank,
            "lines_dropped": self.lines_dropped,
            "events_emitted": self.events_emitted,
            "duration_seconds": self.duration_seconds,
        }


class LogProcessor:
    """
    Drive a LogParser over lines, files or directories.

    The first non-blank line of every input goes through parse_header(),
    all others through parse(). A line yielding no event is counted as
    dropped; in strict mode it raises ParseError instead.

    Example:
        processor = LogProcessor()
        for event in processor.process_file("AWS.S3ServerAccess", path):
            print(event.to_dict())
        print(processor.report.to_dict())
    """

    def __init__(
        self,
        registry: Optional[ParserRegistry] = None,
        settings: Optional[Settings] = None,
        strict: Optional[bool] = None,
    ):
        self.registry = registry if registry is not None else get_registry()
        self.settings = settings if settings is not None else get_settings()
        self.strict = self.settings.strict if strict is None else strict
        self.report: Optional[ProcessingReport] = None

    def parse_line(self, log_type: str, line: str) -> list[Any]:
        """
        Parse a single line with the parser registered for log_type.

        Raises:
            ParserNotFoundError: If log type is not registered
        """
        return self.registry.get_parser(log_type).parse(line)

    def process_lines(
        self,
        log_type: str,
        lines: Iterable[str],
        report: Optional[ProcessingReport] = None,
        source: str = "<lines>",
    ) -> Iterator[Any]:
        """
        Parse an input's lines and yield events.

        Args:
            log_type: Log type identifier
            lines: Raw lines of a single input, in order
            report: Report to update (a new one is started if omitted)
            source: Input name used in log messages

        Yields:
            Structured events

        Raises:
            ParserNotFoundError: If log type is not registered
            ParseError: In strict mode, for the first line yielding no event
        """
        parser = self.registry.get_parser(log_type)
        own_report = report is None
        if own_report:
            report = self._start_report(log_type)
        started = time.monotonic()

        header_pending = True
        for line_number, raw_line in enumerate(lines, 1):
            report.lines_read += 1
            line = raw_line.rstrip("\r\n")
            if self.settings.skip_blank_lines and not line.strip():
                report.lines_blank += 1
                continue

            if header_pending:
                header_pending = False
                events = parser.parse_header(line)
            else:
                events = parser.parse(line)

            if not events:
                report.lines_dropped += 1
                if self.strict:
                    raise ParseError(
                        f"No {log_type} event produced",
                        source=source,
                        line_number=line_number,
                        line_content=line,
                    )
                continue

            report.events_emitted += len(events)
            yield from events

        if own_report:
            report.finish(started)

    def process_file(
        self,
        log_type: str,
        file_path: Path,
        report: Optional[ProcessingReport] = None,
    ) -> Iterator[Any]:
        """
        Parse a plain or gzip-compressed log file.

        Raises:
            ParserNotFoundError: If log type is not registered
            FileNotFoundError: If the file does not exist
            ParseError: In strict mode, for the first line yielding no event
        """
        file_path = Path(file_path)
        own_report = report is None
        if own_report:
            report = self._start_report(log_type)
        started = time.monotonic()

        logger.info(f"Processing {log_type} logs from file: {file_path}")
        with open_file_auto_decompress(file_path) as f:
            yield from self.process_lines(
                log_type, f, report=report, source=str(file_path)
            )
        report.files_processed += 1

        if own_report:
            report.finish(started)

    def process_path(self, log_type: str, input_path: Path) -> Iterator[Any]:
        """
        Parse a file, or every log file under a directory.

        Unreadable files in a directory are skipped with a warning unless
        the processor is strict. The run's statistics are left in self.report.

        Raises:
            ParserNotFoundError: If log type is not registered
            FileNotFoundError: If the path does not exist
            ParseError: In strict mode, for the first line yielding no event
        """
        input_path = Path(input_path)
        # Fail fast on an unknown log type, before any file is opened
        self.registry.get_descriptor(log_type)

        report = self._start_report(log_type)
        started = time.monotonic()

        if input_path.is_file():
            yield from self.process_file(log_type, input_path, report=report)
        elif input_path.is_dir():
            files = list(find_log_files(input_path))
            logger.info(f"Found {len(files)} log files in {input_path}")
            for file_path in files:
                try:
                    yield from self.process_file(log_type, file_path, report=report)
                except (OSError, EOFError) as e:
                    report.files_failed += 1
                    if self.strict:
                        raise
                    logger.warning(f"Failed to process {file_path}: {e}")
        else:
            raise FileNotFoundError(f"Path does not exist: {input_path}")

        report.finish(started)

    def _start_report(self, log_type: str) -> ProcessingReport:
        self.report = ProcessingReport(log_type=log_type)
        return self.report
