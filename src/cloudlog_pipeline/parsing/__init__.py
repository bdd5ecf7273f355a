"""
Log parsing layer: per-format parsers, field decoding, enrichment,
validation and log-type dispatch.

Usage:
    from cloudlog_pipeline.parsing import get_parser

    parser = get_parser("AWS.S3ServerAccess")
    for event in parser.parse(line):
        print(event.core.event_time, event.core.any_ip_addresses)

An empty result means the line was malformed or invalid and should be
skipped; the reason is logged at DEBUG level.
"""

from .awslogs import S3_SERVER_ACCESS_RULES, S3ServerAccess, S3ServerAccessParser
from .base import CoreFields, LogParser, format_event_time, set_core_fields
from .decoders import (
    csv_string_to_optional,
    csv_string_to_optional_int,
    optional_to_csv_string,
    parse_int_token,
)
from .exceptions import (
    DuplicateLogTypeError,
    FieldDecodeError,
    MalformedStructureError,
    ParseError,
    ParserNotFoundError,
    ParsingError,
    RegistryConfigurationError,
    TimestampParseError,
    ValidationError,
)
from .indicators import append_aws_arns, append_ip_addresses, is_aws_arn, is_ip_address
from .registry import (
    AVAILABLE_PARSERS,
    ParserDescriptor,
    ParserRegistry,
    get_parser,
    get_registry,
    list_log_types,
)
from .validation import Charset, ValidationRule, check_rule, validate_event

__all__ = [
    # Contract and envelope
    "LogParser",
    "CoreFields",
    "set_core_fields",
    "format_event_time",
    # Registry
    "ParserDescriptor",
    "ParserRegistry",
    "AVAILABLE_PARSERS",
    "get_registry",
    "get_parser",
    "list_log_types",
    # Decoders
    "csv_string_to_optional",
    "csv_string_to_optional_int",
    "optional_to_csv_string",
    "parse_int_token",
    # Indicators
    "is_ip_address",
    "is_aws_arn",
    "append_ip_addresses",
    "append_aws_arns",
    # Validation
    "Charset",
    "ValidationRule",
    "check_rule",
    "validate_event",
    # Exceptions
    "ParsingError",
    "MalformedStructureError",
    "FieldDecodeError",
    "TimestampParseError",
    "ValidationError",
    "ParserNotFoundError",
    "RegistryConfigurationError",
    "DuplicateLogTypeError",
    "ParseError",
    # AWS formats
    "S3ServerAccess",
    "S3ServerAccessParser",
    "S3_SERVER_ACCESS_RULES",
]
