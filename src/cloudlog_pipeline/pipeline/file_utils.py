"""
Shared file utilities for the processing pipeline.

S3 delivers access logs as plain text; other AWS log sources deliver
gzip archives, so both are read transparently.
"""

import gzip
from pathlib import Path
from typing import IO, Iterator, Union

# Extensions picked up when a directory is processed
LOG_FILE_EXTENSIONS = (".log", ".log.gz", ".txt", ".txt.gz", ".gz")

GZIP_MAGIC = b"\x1f\x8b"


def is_gzip_file(path: Path) -> bool:
    """Check for a .gz suffix, or the gzip magic number for suffix-less S3 objects."""
    if path.suffix.lower() == ".gz":
        return True
    with open(path, "rb") as f:
        return f.read(len(GZIP_MAGIC)) == GZIP_MAGIC


def open_file_auto_decompress(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    errors: str = "replace",
) -> IO[str]:
    """
    Open a plain or gzip-compressed log file for reading text.

    Args:
        file_path: Path to the file
        encoding: Text encoding (default: utf-8)
        errors: Decoding error handler. The default replaces undecodable
            bytes with U+FFFD, so a bad byte costs at most one record

    Returns:
        Open file handle (text mode)

    Raises:
        FileNotFoundError: If file doesn't exist
        gzip.BadGzipFile: On the first read, if a .gz file is not valid gzip
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")

    opener = gzip.open if is_gzip_file(path) else open
    return opener(path, "rt", encoding=encoding, errors=errors)


def find_log_files(dir_path: Path) -> Iterator[Path]:
    """
    Find log files under a directory, recursively and in sorted order.

    S3 names access log objects without an extension, so files with no
    suffix are included as well.
    """
    for file_path in sorted(dir_path.rglob("*")):
        if not file_path.is_file():
            continue
        name = file_path.name.lower()
        if not file_path.suffix or name.endswith(LOG_FILE_EXTENSIONS):
            yield file_path
