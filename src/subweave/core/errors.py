"""Exception types raised by the translation pipeline."""

from __future__ import annotations

from subweave.core.models import ValidationError, ValidationErrorType


class SubweaveError(Exception):
    """Base class for all SubWeave errors."""


class ParseError(SubweaveError):
    """Input text does not match the declared subtitle format.

    Fatal for the file it was raised on; never retried.
    """

    def __init__(self, message: str, line: int | None = None, snippet: str | None = None):
        self.message = message
        self.line = line
        self.snippet = snippet
        location = f"line {line}: " if line is not None else ""
        super().__init__(f"{location}{message}")

    def to_validation_error(self) -> ValidationError:
        return ValidationError(
            cue_id=f"L{self.line}" if self.line is not None else "",
            type=ValidationErrorType.PARSE_ERROR,
            message=str(self),
            received=self.snippet,
        )


class ProviderError(SubweaveError):
    """The translation provider failed or returned unusable output.

    Attributes:
        retryable: Whether resending the same request may succeed.
        status_code: HTTP status reported by the provider, if any.
        retry_after: Seconds the provider asked us to wait, if any.
    """

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        status_code: int | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after = retry_after
