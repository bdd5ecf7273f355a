"""
Token decoders for delimited log formats.

Decoding is lenient: the "no value" sentinel and unparsable numbers both
decode to None, so a single bad optional column never aborts a record.
None stays distinct from an explicit zero or empty string.
"""

import logging
import re
from typing import Optional, Union

from ..config.constants import NULL_SENTINEL
from .exceptions import FieldDecodeError

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int_token(token: str) -> int:
    """
    Parse a canonical base-10 integer token.

    Unlike int(), rejects surrounding whitespace and digit-group underscores.

    Raises:
        FieldDecodeError: If the token is not an integer
    """
    if not _INT_PATTERN.fullmatch(token):
        raise FieldDecodeError("Not an integer", token=token)
    return int(token)


def csv_string_to_optional(token: str, sentinel: str = NULL_SENTINEL) -> Optional[str]:
    """
    Decode a string column.

    Args:
        token: Raw column text
        sentinel: Token meaning "no value"

    Returns:
        The token unchanged, or None for the sentinel
    """
    if token == sentinel:
        return None
    return token


def csv_string_to_optional_int(
    token: str, sentinel: str = NULL_SENTINEL
) -> Optional[int]:
    """
    Decode an integer column.

    Args:
        token: Raw column text
        sentinel: Token meaning "no value"

    Returns:
        Parsed integer, or None for the sentinel or an unparsable token
    """
    if token == sentinel:
        return None
    try:
        return parse_int_token(token)
    except FieldDecodeError as e:
        logger.debug(f"Treating field as absent: {e}")
        return None


def optional_to_csv_string(
    value: Optional[Union[str, int]], sentinel: str = NULL_SENTINEL
) -> str:
    """Encode a decoded value back to its column text (inverse of the decoders)."""
    if value is None:
        return sentinel
    return str(value)
