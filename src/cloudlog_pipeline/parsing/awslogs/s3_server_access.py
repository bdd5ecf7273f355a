"""
AWS S3 server access log parser.

Log format & samples:
https://docs.aws.amazon.com/AmazonS3/latest/dev/LogFormat.html

Records are space-separated with double-quoted fields that may contain
spaces. The request time "[06/Feb/2019:00:00:38 +0000]" is not quoted, so
the tokenizer splits it into two columns which are joined again before the
timestamp is parsed.

Field Mapping (0-indexed):
    Column 0   -> bucket_owner          Column 13  -> object_size
    Column 1   -> bucket                Column 14  -> total_time
    Column 2+3 -> time                  Column 15  -> turn_around_time
    Column 4   -> remote_ip             Column 16  -> referrer
    Column 5   -> requester             Column 17  -> user_agent
    Column 6   -> request_id            Column 18  -> version_id
    Column 7   -> operation             Column 19  -> host_id
    Column 8   -> key                   Column 20  -> signature_version
    Column 9   -> request_uri           Column 21  -> cipher_suite
    Column 10  -> http_status           Column 22  -> authentication_type
    Column 11  -> error_code            Column 23  -> host_header
    Column 12  -> bytes_sent            Column 24  -> tls_version
    Columns 25+ -> additional_fields (kept verbatim, in order)
"""

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ...config.constants import (
    CSV_FIELD_SIZE_LIMIT,
    HTTP_STATUS_MAX,
    HTTP_STATUS_MIN,
    LOG_TYPE_S3_SERVER_ACCESS,
    S3_BUCKET_OWNER_LENGTH,
    S3_SERVER_ACCESS_MIN_COLUMNS,
    S3_SERVER_ACCESS_OFFSET_PATTERN,
    S3_SERVER_ACCESS_TIME_FORMAT,
)
from ..base import CoreFields, format_event_time, set_core_fields
from ..decoders import csv_string_to_optional, csv_string_to_optional_int
from ..exceptions import (
    MalformedStructureError,
    ParsingError,
    TimestampParseError,
    ValidationError,
)
from ..indicators import append_aws_arns, append_ip_addresses
from ..validation import Charset, ValidationRule, validate_event

logger = logging.getLogger(__name__)

csv.field_size_limit(max(csv.field_size_limit(), CSV_FIELD_SIZE_LIMIT))

_UTC_OFFSET = re.compile(S3_SERVER_ACCESS_OFFSET_PATTERN)

S3_SERVER_ACCESS_DESCRIPTION = (
    "S3ServerAccess is an AWS S3 Access Log. Log format & samples can be seen "
    "here: https://docs.aws.amazon.com/AmazonS3/latest/dev/LogFormat.html"
)

S3_SERVER_ACCESS_RULES: tuple[ValidationRule, ...] = (
    ValidationRule(
        field="bucket_owner",
        required=True,
        length=S3_BUCKET_OWNER_LENGTH,
        charset=Charset.ALPHANUMERIC,
    ),
    ValidationRule(
        field="http_status",
        required=True,
        min_value=HTTP_STATUS_MIN,
        max_value=HTTP_STATUS_MAX,
    ),
    ValidationRule(field="core.log_type", required=True),
    ValidationRule(field="core.event_time", required=True),
)

# (attribute, serialized key) in column order; "time" is handled separately
_SERIALIZED_KEYS: tuple[tuple[str, str], ...] = (
    ("bucket_owner", "bucketowner"),
    ("bucket", "bucket"),
    ("remote_ip", "remoteip"),
    ("requester", "requester"),
    ("request_id", "requestid"),
    ("operation", "operation"),
    ("key", "key"),
    ("request_uri", "requesturi"),
    ("http_status", "httpstatus"),
    ("error_code", "errorcode"),
    ("bytes_sent", "bytessent"),
    ("object_size", "objectsize"),
    ("total_time", "totaltime"),
    ("turn_around_time", "turnaroundtime"),
    ("referrer", "referrer"),
    ("user_agent", "useragent"),
    ("version_id", "versionid"),
    ("host_id", "hostid"),
    ("signature_version", "signatureversion"),
    ("cipher_suite", "ciphersuite"),
    ("authentication_type", "authenticationtype"),
    ("host_header", "hostheader"),
    ("tls_version", "tlsVersion"),
)


@dataclass(frozen=True)
class S3ServerAccess:
    """
    A single S3 server access log record.

    Every format field is optional: None means the log carried "-" or an
    unparsable value for that column.

    Events are immutable once emitted: the record is frozen, and the
    parser freezes its core envelope after validation.
    """

    # The canonical user ID of the owner of the source bucket
    bucket_owner: Optional[str] = None
    # The name of the bucket that the request was processed against
    bucket: Optional[str] = None
    # The time at which the request was received (UTC)
    time: Optional[datetime] = None
    # The apparent internet address of the requester
    remote_ip: Optional[str] = None
    # Canonical user ID or IAM ARN of the requester, None if unauthenticated
    requester: Optional[str] = None
    request_id: Optional[str] = None
    # SOAP.operation, REST.HTTP_method.resource_type, WEBSITE... or BATCH.DELETE.OBJECT
    operation: Optional[str] = None
    # URL-encoded key part of the request
    key: Optional[str] = None
    request_uri: Optional[str] = None
    http_status: Optional[int] = None
    error_code: Optional[str] = None
    bytes_sent: Optional[int] = None
    object_size: Optional[int] = None
    # Milliseconds in flight, from the server's perspective
    total_time: Optional[int] = None
    # Milliseconds S3 spent processing the request
    turn_around_time: Optional[int] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    version_id: Optional[str] = None
    # x-amz-id-2 extended request ID
    host_id: Optional[str] = None
    # SigV2 or SigV4
    signature_version: Optional[str] = None
    cipher_suite: Optional[str] = None
    # AuthHeader, QueryString, or None if unauthenticated
    authentication_type: Optional[str] = None
    host_header: Optional[str] = None
    tls_version: Optional[str] = None
    # Columns beyond the documented schema, verbatim
    additional_fields: Optional[tuple[str, ...]] = None

    core: CoreFields = field(default_factory=CoreFields)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary representation.

        Absent fields are omitted; core fields are added with a p_ prefix.
        """
        result: dict[str, Any] = {}
        for attr, key in _SERIALIZED_KEYS[:2]:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        if self.time is not None:
            result["time"] = format_event_time(self.time)
        for attr, key in _SERIALIZED_KEYS[2:]:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        if self.additional_fields:
            result["additionalFields"] = list(self.additional_fields)
        result.update(self.core.to_dict())
        return result


class S3ServerAccessParser:
    """
    Parser for AWS S3 server access logs.

    Stateless: parse() is safe to call concurrently on a shared instance.

    Example:
        parser = S3ServerAccessParser()
        for event in parser.parse(line):
            print(event.bucket, event.core.any_ip_addresses)
    """

    MIN_COLUMN_COUNT = S3_SERVER_ACCESS_MIN_COLUMNS

    def log_type(self) -> str:
        """Return the log type supported by this parser."""
        return LOG_TYPE_S3_SERVER_ACCESS

    def parse_header(self, line: str) -> list[S3ServerAccess]:
        """
        S3 access logs have no header line, so the first line is parsed as data.

        A header row, if one ever appears, fails validation and is dropped.
        """
        return self.parse(line)

    def parse(self, line: str) -> list[S3ServerAccess]:
        """
        Parse a single log line.

        Args:
            line: Raw log line

        Returns:
            List with one event, or an empty list if the line is malformed
            or fails validation
        """
        try:
            event = self._parse_record(line)
        except ParsingError as e:
            logger.debug(f"Dropping {self.log_type()} record: {e}")
            return []

        return [event]

    def _parse_record(self, line: str) -> S3ServerAccess:
        """
        Build, enrich and validate an event from one line.

        Raises:
            MalformedStructureError: If the line has too few columns
            TimestampParseError: If the request time is invalid
            ValidationError: If the event violates S3_SERVER_ACCESS_RULES
        """
        record = self._tokenize(line)
        if len(record) < self.MIN_COLUMN_COUNT:
            raise MalformedStructureError(
                "Wrong number of columns",
                column_count=len(record),
                min_columns=self.MIN_COLUMN_COUNT,
            )

        # [06/Feb/2019:00:00:38 +0000] arrives as two columns
        event_time = self._parse_timestamp(record[2] + record[3])

        additional_fields = None
        if len(record) > self.MIN_COLUMN_COUNT:
            additional_fields = tuple(record[self.MIN_COLUMN_COUNT :])

        event = S3ServerAccess(
            bucket_owner=csv_string_to_optional(record[0]),
            bucket=csv_string_to_optional(record[1]),
            time=event_time,
            remote_ip=csv_string_to_optional(record[4]),
            requester=csv_string_to_optional(record[5]),
            request_id=csv_string_to_optional(record[6]),
            operation=csv_string_to_optional(record[7]),
            key=csv_string_to_optional(record[8]),
            request_uri=csv_string_to_optional(record[9]),
            http_status=csv_string_to_optional_int(record[10]),
            error_code=csv_string_to_optional(record[11]),
            bytes_sent=csv_string_to_optional_int(record[12]),
            object_size=csv_string_to_optional_int(record[13]),
            total_time=csv_string_to_optional_int(record[14]),
            turn_around_time=csv_string_to_optional_int(record[15]),
            referrer=csv_string_to_optional(record[16]),
            user_agent=csv_string_to_optional(record[17]),
            version_id=csv_string_to_optional(record[18]),
            host_id=csv_string_to_optional(record[19]),
            signature_version=csv_string_to_optional(record[20]),
            cipher_suite=csv_string_to_optional(record[21]),
            authentication_type=csv_string_to_optional(record[22]),
            host_header=csv_string_to_optional(record[23]),
            tls_version=csv_string_to_optional(record[24]),
            additional_fields=additional_fields,
        )

        self._update_core_fields(event)

        is_valid, errors = validate_event(event, S3_SERVER_ACCESS_RULES)
        if not is_valid:
            raise ValidationError(errors, log_type=self.log_type())

        event.core.freeze()
        return event

    def _update_core_fields(self, event: S3ServerAccess) -> None:
        """Set the envelope and extract indicators."""
        set_core_fields(event.core, self.log_type(), event.time)
        append_ip_addresses(event.core, event.remote_ip)
        append_aws_arns(event.core, event.requester)

    @staticmethod
    def _tokenize(line: str) -> list[str]:
        """
        Split a line into columns.

        Only the first row is used; the processor hands over one line at a time.

        Quoting is lenient: a stray quote inside an unquoted column is kept,
        while one inside a quoted column is dropped and ends the quoting,
        so '"Mozilla "x" y"' yields 'Mozilla x"' followed by 'y"'.

        Raises:
            MalformedStructureError: If the line is empty or cannot be split
        """
        reader = csv.reader(
            io.StringIO(line, newline=""),
            delimiter=" ",
            quotechar='"',
            strict=False,
        )
        try:
            record = next(reader, None)
        except csv.Error as e:
            raise MalformedStructureError(f"Cannot split line into columns: {e}") from e

        if not record:
            raise MalformedStructureError("Line contains no columns")
        return record

    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        """
        Parse the joined request time into a UTC datetime.

        Raises:
            TimestampParseError: If the value does not match the layout
        """
        if not _UTC_OFFSET.search(value):
            raise TimestampParseError(value, S3_SERVER_ACCESS_TIME_FORMAT)
        try:
            parsed = datetime.strptime(value, S3_SERVER_ACCESS_TIME_FORMAT)
        except ValueError as e:
            raise TimestampParseError(value, S3_SERVER_ACCESS_TIME_FORMAT) from e
        return parsed.astimezone(timezone.utc)
