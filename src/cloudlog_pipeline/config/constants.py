"""
Constants for log types, field decoding and indicator extraction.
"""

# =============================================================================
# Log Types
# =============================================================================

# Log type identifiers are a durable contract: they tag every emitted event
# and are used by downstream consumers. Never rename an existing value.
LOG_TYPE_S3_SERVER_ACCESS = "AWS.S3ServerAccess"

DEFAULT_LOG_TYPE = LOG_TYPE_S3_SERVER_ACCESS

# =============================================================================
# Field Decoding
# =============================================================================

# Token used by space-delimited AWS logs for "no value"
NULL_SENTINEL = "-"

# =============================================================================
# Indicators
# =============================================================================

# Requester values starting with this prefix are AWS ARNs
AWS_ARN_PREFIX = "arn:"

# =============================================================================
# S3 Server Access Logs
# =============================================================================
# See https://docs.aws.amazon.com/AmazonS3/latest/dev/LogFormat.html

S3_SERVER_ACCESS_MIN_COLUMNS = 25

# Layout after the two bracketed tokens are concatenated,
# e.g. "[06/Feb/2019:00:00:38+0000]"
S3_SERVER_ACCESS_TIME_FORMAT = "[%d/%b/%Y:%H:%M:%S%z]"

# strptime %z also takes "Z" and "+HH:MM"; the log only ever writes "+HHMM"
S3_SERVER_ACCESS_OFFSET_PATTERN = r"[+-][0-9]{4}\]\Z"

# Upper bound for a single column. The csv module defaults to 131072
# characters, which a long request URI or user agent can exceed.
CSV_FIELD_SIZE_LIMIT = 2**31 - 1

# Canonical user ID of the bucket owner
S3_BUCKET_OWNER_LENGTH = 64

# Accepted HTTP status codes, half-open range [min, max)
HTTP_STATUS_MIN = 100
HTTP_STATUS_MAX = 600
