"""
Shared fixtures for unit and integration tests.

Provides a builder for S3 server access log lines based on the sample
record from the AWS documentation.
"""

from typing import Callable, Optional

import pytest

from cloudlog_pipeline.config import clear_settings_cache

BUCKET_OWNER = "79a59df900b949e55d96a1e698fbacedfd6e09d98eacf8f8d5218e7cd47ef2be"

# Raw column text, quotes included, exactly as written in the log
S3_SAMPLE_COLUMNS = [
    BUCKET_OWNER,  # 0 bucket owner
    "awsexamplebucket1",  # 1 bucket
    "[06/Feb/2019:00:00:38",  # 2 time (date part)
    "+0000]",  # 3 time (offset part)
    "192.0.2.3",  # 4 remote ip
    BUCKET_OWNER,  # 5 requester
    "3E57427F3EXAMPLE",  # 6 request id
    "REST.GET.VERSIONING",  # 7 operation
    "-",  # 8 key
    '"GET /awsexamplebucket1?versioning HTTP/1.1"',  # 9 request uri
    "200",  # 10 http status
    "-",  # 11 error code
    "113",  # 12 bytes sent
    "-",  # 13 object size
    "7",  # 14 total time
    "-",  # 15 turn around time
    '"-"',  # 16 referrer
    '"S3Console/0.4"',  # 17 user agent
    "-",  # 18 version id
    "s9lzHYrFp76ZVxRcpX9+5cjAnEH2ROuNkd2BHfIa6UkFVdtjf5mKR3/eTPFvsiP/XV/VLi31234=",  # 19
    "SigV2",  # 20 signature version
    "ECDHE-RSA-AES128-GCM-SHA256",  # 21 cipher suite
    "AuthHeader",  # 22 authentication type
    "awsexamplebucket1.s3.us-west-1.amazonaws.com",  # 23 host header
    "TLSV1.1",  # 24 tls version
]

S3LineFactory = Callable[..., str]


def build_s3_line(
    overrides: Optional[dict[int, str]] = None,
    extra: Optional[list[str]] = None,
    num_columns: Optional[int] = None,
) -> str:
    """
    Build an S3 server access log line.

    Args:
        overrides: Column index -> raw column text
        extra: Columns appended after the documented 25
        num_columns: Truncate the documented columns to this many

    Returns:
        Space-joined log line
    """
    columns = list(S3_SAMPLE_COLUMNS)
    for index, value in (overrides or {}).items():
        columns[index] = value
    if num_columns is not None:
        columns = columns[:num_columns]
    if extra:
        columns.extend(extra)
    return " ".join(columns)


@pytest.fixture
def make_s3_line() -> S3LineFactory:
    """Return the S3 log line builder."""
    return build_s3_line


@pytest.fixture
def s3_line() -> str:
    """A valid S3 server access log line."""
    return build_s3_line()


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Ensure cached settings never leak between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()
