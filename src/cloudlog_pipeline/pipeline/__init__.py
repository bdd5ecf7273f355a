"""Line processing pipeline built on the parser registry."""

from .file_utils import find_log_files, is_gzip_file, open_file_auto_decompress
from .logging_setup import setup_logging
from .processor import LogProcessor, ProcessingReport

__all__ = [
    # Processing
    "LogProcessor",
    "ProcessingReport",
    # File utilities
    "open_file_auto_decompress",
    "is_gzip_file",
    "find_log_files",
    # Logging
    "setup_logging",
]
