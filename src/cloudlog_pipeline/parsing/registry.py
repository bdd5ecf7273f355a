"""
Parser registry mapping log types to parser factories.

The registry is built once from a static list of descriptors and is
read-only afterwards, so lookups need no locking.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from ..config.constants import LOG_TYPE_S3_SERVER_ACCESS
from .awslogs import S3_SERVER_ACCESS_DESCRIPTION, S3ServerAccessParser
from .base import LogParser
from .exceptions import (
    DuplicateLogTypeError,
    ParserNotFoundError,
    RegistryConfigurationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserDescriptor:
    """
    Registration entry for one log type.

    Attributes:
        log_type: Unique log type identifier (e.g. "AWS.S3ServerAccess")
        factory: Callable returning a new LogParser
        description: Human-readable description of the format
    """

    log_type: str
    factory: Callable[[], LogParser]
    description: str = ""


class ParserRegistry:
    """
    Read-only registry of log parsers.

    Usage:
        registry = ParserRegistry([
            ParserDescriptor("AWS.S3ServerAccess", S3ServerAccessParser),
        ])

        # Get a parser instance
        parser = registry.get_parser("AWS.S3ServerAccess")

        # List all log types
        log_types = registry.list_log_types()

    Raises at construction time if the descriptor list is inconsistent;
    these are programming errors, not runtime conditions.
    """

    def __init__(self, descriptors: Iterable[ParserDescriptor]):
        entries: dict[str, ParserDescriptor] = {}

        for descriptor in descriptors:
            if descriptor.log_type in entries:
                raise DuplicateLogTypeError(descriptor.log_type)
            self._check_factory(descriptor)
            entries[descriptor.log_type] = descriptor
            logger.debug(f"Registered log parser: {descriptor.log_type}")

        self._descriptors: Mapping[str, ParserDescriptor] = MappingProxyType(entries)

    @staticmethod
    def _check_factory(descriptor: ParserDescriptor) -> None:
        """
        Verify a descriptor's factory produces a matching LogParser.

        Raises:
            TypeError: If the product does not implement LogParser
            RegistryConfigurationError: If the product reports another log type
        """
        parser = descriptor.factory()
        if not isinstance(parser, LogParser):
            raise TypeError(
                f"Parser for '{descriptor.log_type}' must implement LogParser, "
                f"got {type(parser).__name__}"
            )
        if parser.log_type() != descriptor.log_type:
            raise RegistryConfigurationError(
                f"Parser registered as '{descriptor.log_type}' reports "
                f"log type '{parser.log_type()}'"
            )

    @property
    def descriptors(self) -> Mapping[str, ParserDescriptor]:
        """Read-only view of the registered descriptors, keyed by log type."""
        return self._descriptors

    def get_descriptor(self, log_type: str) -> ParserDescriptor:
        """
        Get the descriptor for a log type.

        Raises:
            ParserNotFoundError: If log type is not registered
        """
        try:
            return self._descriptors[log_type]
        except KeyError:
            raise ParserNotFoundError(
                log_type=log_type,
                available_log_types=list(self._descriptors.keys()),
            ) from None

    def get_parser(self, log_type: str) -> LogParser:
        """
        Get a new parser instance for a log type.

        Args:
            log_type: Log type identifier (case-sensitive)

        Returns:
            Parser for the log type

        Raises:
            ParserNotFoundError: If log type is not registered
        """
        return self.get_descriptor(log_type).factory()

    def list_log_types(self) -> list[str]:
        """
        List all registered log types.

        Returns:
            Sorted list of log type identifiers
        """
        return sorted(self._descriptors.keys())

    def __contains__(self, log_type: object) -> bool:
        return log_type in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


# =============================================================================
# Default Registry
# =============================================================================

AVAILABLE_PARSERS: tuple[ParserDescriptor, ...] = (
    ParserDescriptor(
        log_type=LOG_TYPE_S3_SERVER_ACCESS,
        factory=S3ServerAccessParser,
        description=S3_SERVER_ACCESS_DESCRIPTION,
    ),
)


@lru_cache(maxsize=1)
def get_registry() -> ParserRegistry:
    """
    Get the process-wide registry built from AVAILABLE_PARSERS.

    Returns:
        Cached ParserRegistry instance
    """
    return ParserRegistry(AVAILABLE_PARSERS)


def get_parser(log_type: str) -> LogParser:
    """
    Get a parser instance from the default registry.

    Convenience function wrapping get_registry().get_parser().

    Raises:
        ParserNotFoundError: If log type is not registered
    """
    return get_registry().get_parser(log_type)


def list_log_types() -> list[str]:
    """
    List all log types in the default registry.

    Convenience function wrapping get_registry().list_log_types().
    """
    return get_registry().list_log_types()
