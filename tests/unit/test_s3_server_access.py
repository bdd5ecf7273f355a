"""
Unit tests for the AWS S3 server access log parser.

Tests tokenization, timestamp recombination, field decoding, overflow
columns, indicator extraction and validation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from cloudlog_pipeline.parsing import (
    LogParser,
    S3ServerAccess,
    S3ServerAccessParser,
)

BUCKET_OWNER = "79a59df900b949e55d96a1e698fbacedfd6e09d98eacf8f8d5218e7cd47ef2be"
PARSER_LOGGER = "cloudlog_pipeline.parsing.awslogs.s3_server_access"


@pytest.fixture
def parser() -> S3ServerAccessParser:
    return S3ServerAccessParser()


class TestParserContract:
    """Tests for the LogParser capability contract."""

    def test_implements_log_parser(self, parser):
        assert isinstance(parser, LogParser)

    def test_log_type(self, parser):
        assert parser.log_type() == "AWS.S3ServerAccess"

    def test_parse_header_delegates_to_parse(self, parser, s3_line):
        """S3 logs have no header, so the first line is ordinary data."""
        assert parser.parse_header(s3_line) == parser.parse(s3_line)
        assert len(parser.parse_header(s3_line)) == 1

    def test_header_row_is_dropped(self, parser):
        """A column-name row is parsed as data and rejected."""
        header = " ".join(
            [
                "bucketowner", "bucket", "time", "tz", "remoteip", "requester",
                "requestid", "operation", "key", "requesturi", "httpstatus",
                "errorcode", "bytessent", "objectsize", "totaltime",
                "turnaroundtime", "referrer", "useragent", "versionid", "hostid",
                "signatureversion", "ciphersuite", "authenticationtype",
                "hostheader", "tlsversion",
            ]
        )
        assert parser.parse_header(header) == []


class TestParseSample:
    """Tests against the documented sample record."""

    def test_returns_single_event(self, parser, s3_line):
        events = parser.parse(s3_line)
        assert len(events) == 1
        assert isinstance(events[0], S3ServerAccess)

    def test_fields(self, parser, s3_line):
        event = parser.parse(s3_line)[0]

        assert event.bucket_owner == BUCKET_OWNER
        assert event.bucket == "awsexamplebucket1"
        assert event.time == datetime(2019, 2, 6, 0, 0, 38, tzinfo=timezone.utc)
        assert event.remote_ip == "192.0.2.3"
        assert event.requester == BUCKET_OWNER
        assert event.request_id == "3E57427F3EXAMPLE"
        assert event.operation == "REST.GET.VERSIONING"
        assert event.request_uri == "GET /awsexamplebucket1?versioning HTTP/1.1"
        assert event.http_status == 200
        assert event.bytes_sent == 113
        assert event.total_time == 7
        assert event.user_agent == "S3Console/0.4"
        assert event.signature_version == "SigV2"
        assert event.cipher_suite == "ECDHE-RSA-AES128-GCM-SHA256"
        assert event.authentication_type == "AuthHeader"
        assert event.host_header == "awsexamplebucket1.s3.us-west-1.amazonaws.com"
        assert event.tls_version == "TLSV1.1"

    def test_sentinel_fields_are_absent(self, parser, s3_line):
        """Every '-' column, quoted or not, decodes to None."""
        event = parser.parse(s3_line)[0]

        assert event.key is None
        assert event.error_code is None
        assert event.object_size is None
        assert event.turn_around_time is None
        assert event.referrer is None
        assert event.version_id is None

    def test_core_fields(self, parser, s3_line):
        event = parser.parse(s3_line)[0]

        assert event.core.log_type == "AWS.S3ServerAccess"
        assert event.core.event_time == event.time
        assert event.core.any_ip_addresses == {"192.0.2.3"}
        # The requester is a canonical user ID, not an ARN
        assert event.core.any_aws_arns == frozenset()

    def test_indicator_sets_are_frozen(self, parser, s3_line):
        event = parser.parse(s3_line)[0]
        assert isinstance(event.core.any_ip_addresses, frozenset)
        assert isinstance(event.core.any_aws_arns, frozenset)

    def test_mybucket_scenario(self, parser, make_s3_line):
        line = make_s3_line({1: "mybucket"})
        events = parser.parse(line)

        assert len(events) == 1
        assert events[0].bucket == "mybucket"
        assert events[0].core.event_time == datetime(
            2019, 2, 6, 0, 0, 38, tzinfo=timezone.utc
        )
        assert events[0].core.any_ip_addresses == {"192.0.2.3"}


class TestColumns:
    """Tests for column count and overflow columns."""

    @pytest.mark.parametrize("num_columns", [0, 1, 10, 24])
    def test_too_few_columns_is_dropped(self, parser, make_s3_line, num_columns):
        assert parser.parse(make_s3_line(num_columns=num_columns)) == []

    def test_empty_line_is_dropped(self, parser):
        assert parser.parse("") == []

    def test_exactly_min_columns_has_no_additional_fields(self, parser, s3_line):
        assert parser.parse(s3_line)[0].additional_fields is None

    def test_additional_fields_preserved_in_order(self, parser, make_s3_line):
        extra = ["SSE-KMS", "-", "x-amz-new-column", "0"]
        event = parser.parse(make_s3_line(extra=extra))[0]
        assert event.additional_fields == tuple(extra)

    def test_quoted_column_with_spaces(self, parser, make_s3_line):
        line = make_s3_line({17: '"aws-cli/1.16.96 Python/2.7.15 Linux/4.14"'})
        event = parser.parse(line)[0]
        assert event.user_agent == "aws-cli/1.16.96 Python/2.7.15 Linux/4.14"

    def test_stray_quote_is_tolerated(self, parser, make_s3_line):
        line = make_s3_line({8: 'photos/my"file.jpg'})
        event = parser.parse(line)[0]
        assert event.key == 'photos/my"file.jpg'

    def test_quote_inside_quoted_column(self, parser, make_s3_line):
        """An inner quote ends the quoting; the remainder spills into the next column."""
        line = make_s3_line({17: '"Mozilla "x" y"'})
        event = parser.parse(line)[0]
        assert event.user_agent == 'Mozilla x"'
        assert event.version_id == 'y"'
        assert event.additional_fields == ("TLSV1.1",)

    def test_column_longer_than_csv_default_limit(self, parser, make_s3_line):
        request_uri = "GET /" + "a" * 140_000 + " HTTP/1.1"
        events = parser.parse(make_s3_line({9: f'"{request_uri}"'}))
        assert len(events) == 1
        assert events[0].request_uri == request_uri


class TestTimestamp:
    """Tests for request time recombination and parsing."""

    def test_offset_is_converted_to_utc(self, parser, make_s3_line):
        line = make_s3_line({2: "[06/Feb/2019:01:30:38", 3: "+0130]"})
        event = parser.parse(line)[0]
        assert event.core.event_time == datetime(
            2019, 2, 6, 0, 0, 38, tzinfo=timezone.utc
        )

    def test_matches_concatenated_parse(self, parser, make_s3_line):
        date_part, offset_part = "[31/Dec/2020:23:59:59", "-0500]"
        event = parser.parse(make_s3_line({2: date_part, 3: offset_part}))[0]
        expected = datetime.strptime(
            date_part + offset_part, "[%d/%b/%Y:%H:%M:%S%z]"
        ).astimezone(timezone.utc)
        assert event.time == expected
        assert event.time.utcoffset().total_seconds() == 0

    @pytest.mark.parametrize(
        "date_part,offset_part",
        [
            ("06/Feb/2019:00:00:38", "+0000]"),
            ("[06/Feb/2019:00:00:38", "+0000"),
            ("[2019-02-06T00:00:38", "+0000]"),
            ("[31/Feb/2019:00:00:38", "+0000]"),
            ("[06/Feb/2019:00:00:38", "UTC]"),
            ("[06/Feb/2019:00:00:38", "Z]"),
            ("[06/Feb/2019:00:00:38", "+00:00]"),
            ("[06/Feb/2019:00:00:38", "+000000]"),
            ("-", "-"),
        ],
    )
    def test_invalid_timestamp_is_dropped(
        self, parser, make_s3_line, date_part, offset_part
    ):
        assert parser.parse(make_s3_line({2: date_part, 3: offset_part})) == []


class TestIndicators:
    """Tests for indicator extraction from S3 records."""

    def test_arn_requester(self, parser, make_s3_line):
        arn = "arn:aws:iam::123456789012:user/alice"
        event = parser.parse(make_s3_line({5: arn}))[0]
        assert event.core.any_aws_arns == {arn}

    def test_arn_prefix_is_enough(self, parser, make_s3_line):
        requester = "arn:aws:iam::123456789012"
        event = parser.parse(make_s3_line({5: requester}))[0]
        assert event.core.any_aws_arns == {requester}

    def test_ipv6_remote_ip(self, parser, make_s3_line):
        event = parser.parse(make_s3_line({4: "2001:db8::1"}))[0]
        assert event.core.any_ip_addresses == {"2001:db8::1"}

    def test_no_indicators(self, parser, make_s3_line):
        event = parser.parse(make_s3_line({4: "-", 5: "-"}))[0]
        assert event.remote_ip is None
        assert event.requester is None
        assert event.core.any_ip_addresses == frozenset()
        assert event.core.any_aws_arns == frozenset()

    def test_non_ip_remote_value_is_not_an_indicator(self, parser, make_s3_line):
        event = parser.parse(make_s3_line({4: "unknown-host"}))[0]
        assert event.remote_ip == "unknown-host"
        assert event.core.any_ip_addresses == frozenset()


class TestValidation:
    """Tests for S3 validation rules."""

    @pytest.mark.parametrize("status", ["100", "204", "404", "599"])
    def test_status_in_range_is_accepted(self, parser, make_s3_line, status):
        assert len(parser.parse(make_s3_line({10: status}))) == 1

    @pytest.mark.parametrize("status", ["99", "600", "0", "999"])
    def test_status_out_of_range_is_dropped(self, parser, make_s3_line, status):
        assert parser.parse(make_s3_line({10: status})) == []

    @pytest.mark.parametrize("status", ["-", "OK"])
    def test_missing_status_is_dropped(self, parser, make_s3_line, status):
        """An absent status fails the required rule."""
        assert parser.parse(make_s3_line({10: status})) == []

    @pytest.mark.parametrize(
        "owner",
        ["-", "abc123", BUCKET_OWNER + "0", BUCKET_OWNER[:-1] + "-"],
    )
    def test_invalid_bucket_owner_is_dropped(self, parser, make_s3_line, owner):
        assert parser.parse(make_s3_line({0: owner})) == []

    def test_malformed_optional_field_keeps_record(self, parser, make_s3_line):
        """A bad optional number becomes absent without rejecting the record."""
        event = parser.parse(make_s3_line({12: "lots"}))[0]
        assert event.bytes_sent is None

    def test_rejection_is_logged_at_debug(self, parser, make_s3_line, caplog):
        caplog.set_level(logging.DEBUG, logger=PARSER_LOGGER)
        assert parser.parse(make_s3_line({10: "700"})) == []
        assert "failed validation" in caplog.text
        assert "http_status" in caplog.text


class TestSerialization:
    """Tests for S3ServerAccess.to_dict."""

    def test_to_dict_keys(self, parser, make_s3_line):
        event = parser.parse(make_s3_line(extra=["extra1"]))[0]
        result = event.to_dict()

        assert result["bucketowner"] == BUCKET_OWNER
        assert result["bucket"] == "awsexamplebucket1"
        assert result["time"] == "2019-02-06T00:00:38Z"
        assert result["httpstatus"] == 200
        assert result["tlsVersion"] == "TLSV1.1"
        assert result["additionalFields"] == ["extra1"]
        assert result["p_log_type"] == "AWS.S3ServerAccess"
        assert result["p_event_time"] == "2019-02-06T00:00:38Z"
        assert result["p_any_ip_addresses"] == ["192.0.2.3"]

    def test_to_dict_omits_absent_fields(self, parser, s3_line):
        result = parser.parse(s3_line)[0].to_dict()
        assert "key" not in result
        assert "errorcode" not in result
        assert "additionalFields" not in result
        assert "p_any_aws_arns" not in result


class TestConcurrency:
    """Tests that a shared parser is safe across threads."""

    def test_shared_instance_in_threads(self, parser, make_s3_line):
        lines = [
            make_s3_line({1: f"bucket-{i}", 10: str(200 + i % 300)}) for i in range(200)
        ]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(parser.parse, lines))

        assert [r[0].bucket for r in results] == [f"bucket-{i}" for i in range(200)]
        assert all(len(r) == 1 for r in results)


class TestImmutability:
    """Tests that emitted events cannot be changed."""

    def test_event_fields_are_frozen(self, parser, s3_line):
        event = parser.parse(s3_line)[0]
        with pytest.raises(FrozenInstanceError):
            event.bucket = "other-bucket"

    def test_core_envelope_is_frozen(self, parser, s3_line):
        event = parser.parse(s3_line)[0]
        with pytest.raises(FrozenInstanceError):
            event.core.log_type = "Test.Other"
        with pytest.raises(FrozenInstanceError):
            event.core.event_time = None
