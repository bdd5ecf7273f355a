"""
Custom exceptions for the parsing module.

Record-level errors (malformed structure, timestamp, validation) are raised
inside a parser and converted to an empty result before they reach the
caller. Only registry errors and strict-mode processing errors propagate.
"""


class ParsingError(Exception):
    """
    Base exception for all parsing-related errors.

    All other parsing exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class MalformedStructureError(ParsingError):
    """
    Raised when a line cannot be split into the expected columns.

    Attributes:
        column_count: Number of columns found (optional)
        min_columns: Minimum number of columns required (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        column_count: int | None = None,
        min_columns: int | None = None,
    ):
        self.column_count = column_count
        self.min_columns = min_columns
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with column context."""
        if self.column_count is not None and self.min_columns is not None:
            return (
                f"{self.message} (got {self.column_count} columns, "
                f"expected at least {self.min_columns})"
            )
        return self.message


class FieldDecodeError(ParsingError):
    """
    Raised when a single token cannot be decoded into its field type.

    Never fatal to a record: the lenient decoders catch it and
    treat the field as absent.
    """

    def __init__(self, message: str, token: str | None = None):
        self.token = token
        self.message = message
        super().__init__(
            f"{message} (token={token!r})" if token is not None else message
        )


class TimestampParseError(ParsingError):
    """
    Raised when the mandatory event time cannot be derived from a record.

    Attributes:
        value: The timestamp text that failed to parse
        layout: The layout it was parsed against
    """

    def __init__(self, value: str, layout: str):
        self.value = value
        self.layout = layout
        super().__init__(f"Cannot parse timestamp {value!r} with layout {layout!r}")


class ValidationError(ParsingError):
    """
    Raised when an enriched event violates one or more validation rules.

    Attributes:
        errors: Every rule violation found on the event
        log_type: Log type of the rejected event (optional)
    """

    def __init__(self, errors: list[str], log_type: str | None = None):
        self.errors = list(errors)
        self.log_type = log_type
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with all violations."""
        prefix = f"{self.log_type} event" if self.log_type else "Event"
        return f"{prefix} failed validation: {'; '.join(self.errors)}"


class ParserNotFoundError(ParsingError):
    """
    Raised when no parser is registered for a log type.

    Attributes:
        log_type: The requested log type
        available_log_types: List of registered log types
    """

    def __init__(
        self,
        log_type: str,
        available_log_types: list[str] | None = None,
    ):
        self.log_type = log_type
        self.available_log_types = available_log_types or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with available log types."""
        if self.available_log_types:
            available = ", ".join(sorted(self.available_log_types))
            return (
                f"No parser for log type: '{self.log_type}'. "
                f"Available log types: {available}"
            )
        return f"No parser for log type: '{self.log_type}'. No parsers registered."


class RegistryConfigurationError(ParsingError):
    """Raised when the parser registry is built from an invalid descriptor list."""

    pass


class DuplicateLogTypeError(RegistryConfigurationError):
    """Raised when two descriptors declare the same log type."""

    def __init__(self, log_type: str):
        self.log_type = log_type
        super().__init__(f"Log type registered more than once: '{log_type}'")


class ParseError(ParsingError):
    """
    Raised by the processor in strict mode when a line yields no event.

    The message reads "<source>:<line>: <message> [<line content>]",
    with the content shortened to MAX_CONTENT_LENGTH characters.

    Attributes:
        source: Input the line came from, e.g. a file path (optional)
        line_number: 1-based position of the line in its source (optional)
        line_content: The dropped line (optional)
    """

    MAX_CONTENT_LENGTH = 100

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line_number: int | None = None,
        line_content: str | None = None,
    ):
        self.message = message
        self.source = source
        self.line_number = line_number
        self.line_content = line_content
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        text = self.message
        if self.source is not None or self.line_number is not None:
            location = self.source or "<input>"
            if self.line_number is not None:
                location = f"{location}:{self.line_number}"
            text = f"{location}: {text}"
        if self.line_content:
            content = self.line_content
            if len(content) > self.MAX_CONTENT_LENGTH:
                content = content[: self.MAX_CONTENT_LENGTH] + "..."
            text = f"{text} [{content!r}]"
        return text
