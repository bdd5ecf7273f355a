"""
Indicator extraction for cross-event correlation.

IP candidates must be valid IPv4 or IPv6 literals. ARN candidates are
recognized by their "arn:" prefix alone, so a requester ARN is never
missed because its service uses a shorter layout.
"""

import ipaddress
from typing import Any, Optional

from ..config.constants import AWS_ARN_PREFIX
from .base import CoreFields


def is_ip_address(value: Any) -> bool:
    """
    Check whether a value is an IPv4 or IPv6 literal.

    Args:
        value: Value to check

    Returns:
        True if valid IPv4 or IPv6 address
    """
    if not value or not isinstance(value, str):
        return False

    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def is_aws_arn(value: Any) -> bool:
    """
    Check whether a value carries an AWS ARN.

    Only the "arn:" prefix is required, with at least one character after
    it. ARNs for some services omit trailing sections, so the section
    layout is not checked.
    """
    if not value or not isinstance(value, str):
        return False
    return value.startswith(AWS_ARN_PREFIX) and len(value) > len(AWS_ARN_PREFIX)


def append_ip_addresses(core: CoreFields, *values: Optional[str]) -> None:
    """Add every value that is an IP literal to the IP indicator set."""
    for value in values:
        if is_ip_address(value):
            core.any_ip_addresses.add(value)


def append_aws_arns(core: CoreFields, *values: Optional[str]) -> None:
    """Add every value that is an AWS ARN to the ARN indicator set."""
    for value in values:
        if is_aws_arn(value):
            core.any_aws_arns.add(value)
