"""
Error taxonomy for the dashboard data layer

    - TransportError: network/HTTP/timeout failure with no structured body
    - PayloadError: the server answered, but with a payload we cannot read
    - ValidationError / ParseError: a user-supplied document is malformed
    - AggregatedQueryError: one or more of several independent queries failed
    - InvalidTransitionError: a state machine was driven out of order

A partially failed import is not an error: it is an ImportResult with failed > 0.
"""


class StrikeboardError(Exception):
    """Base class for all dashboard data-layer errors. Carries a human-readable message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(StrikeboardError):
    """
    Network or HTTP failure without a structured per-item response.

    Attributes:
        message: Human-readable description (the server's "error" string when it sent one)
        status_code: HTTP status code, or None for network failures and timeouts
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PayloadError(TransportError):
    """The remote call succeeded but returned a payload that does not match the expected shape."""


class ValidationError(StrikeboardError):
    """Input document failed validation before any network call was made."""


class ParseError(ValidationError):
    """
    Uploaded scenario document could not be normalized into an import batch.

    Attributes:
        message: Short reason ("malformed json", "invalid format", "invalid scenario")
        errors: One self-describing entry per rejected element (empty for document-level failures)
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        return f"{self.message}: {'; '.join(self.errors)}"


class AggregatedQueryError(StrikeboardError):
    """
    One or more independent queries failed.

    The displayed message is the one from the highest-priority failing query.

    Attributes:
        source: Query kind whose error is displayed
        errors: Every failing query kind mapped to its error, in priority order
    """

    def __init__(self, source: str, errors: dict[str, StrikeboardError]):
        super().__init__(errors[source].message)
        self.source = source
        self.errors = errors

    @property
    def primary(self) -> StrikeboardError:
        return self.errors[self.source]


class InvalidTransitionError(StrikeboardError):
    """Raised when a state machine receives an event that is illegal in its current state."""
