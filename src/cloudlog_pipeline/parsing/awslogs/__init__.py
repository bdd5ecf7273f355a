"""
Parsers for AWS service logs.

Currently supports:
- S3 server access logs (AWS.S3ServerAccess)
"""

from .s3_server_access import (
    S3_SERVER_ACCESS_DESCRIPTION,
    S3_SERVER_ACCESS_RULES,
    S3ServerAccess,
    S3ServerAccessParser,
)

__all__ = [
    "S3ServerAccess",
    "S3ServerAccessParser",
    "S3_SERVER_ACCESS_RULES",
    "S3_SERVER_ACCESS_DESCRIPTION",
]
