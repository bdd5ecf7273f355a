"""
Parser contract and the envelope shared by every structured event.

Each source format implements LogParser independently; there is no
parser base class. Events of every format carry a CoreFields envelope
holding the log type, the event time and the extracted indicators.
"""

from dataclasses import FrozenInstanceError, dataclass, field
from datetime import datetime, timezone
from typing import AbstractSet, Any, Optional, Protocol, runtime_checkable


@dataclass
class CoreFields:
    """
    Format-independent metadata attached to every event.

    Attributes:
        log_type: Log type identifier of the producing parser
        event_time: Time the logged event happened (UTC)
        any_ip_addresses: IP address indicators found in the event
        any_aws_arns: AWS ARN indicators found in the event

    The envelope is mutable while the producing parser enriches the event.
    Once the event is accepted, freeze() turns the indicator sets into
    frozensets and rejects any further attribute assignment.
    """

    log_type: Optional[str] = None
    event_time: Optional[datetime] = None
    any_ip_addresses: AbstractSet[str] = field(default_factory=set)
    any_aws_arns: AbstractSet[str] = field(default_factory=set)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenInstanceError(f"cannot assign to field '{name}'")
        super().__setattr__(name, value)

    def freeze(self) -> None:
        """Make the envelope immutable."""
        self.any_ip_addresses = frozenset(self.any_ip_addresses)
        self.any_aws_arns = frozenset(self.any_aws_arns)
        object.__setattr__(self, "_frozen", True)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the p_-prefixed dictionary representation.

        Empty indicator sets are omitted; sets are emitted as sorted lists.
        """
        result: dict[str, Any] = {}
        if self.log_type is not None:
            result["p_log_type"] = self.log_type
        if self.event_time is not None:
            result["p_event_time"] = format_event_time(self.event_time)
        if self.any_ip_addresses:
            result["p_any_ip_addresses"] = sorted(self.any_ip_addresses)
        if self.any_aws_arns:
            result["p_any_aws_arns"] = sorted(self.any_aws_arns)
        return result


def format_event_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339 in UTC with a trailing Z."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@runtime_checkable
class LogParser(Protocol):
    """
    Capability contract implemented once per source format.

    Implementations must not mutate any state across calls, so a single
    instance may parse any number of lines concurrently.
    """

    def parse(self, line: str) -> list[Any]:
        """Parse one line into zero or one events. Never raises for bad input."""
        ...

    def parse_header(self, line: str) -> list[Any]:
        """Parse the first line of an input, which may be a column header."""
        ...

    def log_type(self) -> str:
        """Return the stable log type identifier of this format."""
        ...


def set_core_fields(core: CoreFields, log_type: str, event_time: datetime) -> None:
    """
    Attach the log type and event time to an event envelope.

    Runs after field population and before validation.
    """
    core.log_type = log_type
    core.event_time = event_time
