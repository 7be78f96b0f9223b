"""
Custom exceptions for the deal promotion pipeline.

Provides:
- Typed exception hierarchy for each pipeline stage
- Error context preservation for debugging
- The internal price-rejection signal used by the negotiator
"""

from typing import Any


class DealPromoterError(Exception):
    """Base exception for all deal promoter errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Stage Errors
# =============================================================================


class FetchError(DealPromoterError):
    """Network or disk failure while downloading content."""

    pass


class ProcessError(DealPromoterError):
    """External tool failed to start or exited nonzero."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        stderr: str = '',
        returncode: int | None = None,
    ):
        super().__init__(message, context)
        self.stderr = stderr
        self.returncode = returncode


class ProcessTimeoutError(ProcessError):
    """External tool did not finish within its timeout and was killed."""

    pass


class ParseError(DealPromoterError):
    """Tool output did not match the expected line schema."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        field: str | None = None,
        line_number: int | None = None,
    ):
        super().__init__(message, context)
        self.field = field
        self.line_number = line_number


class PriceRejected(DealPromoterError):
    """
    Provider rejected the offered price-per-epoch.

    Raised and handled inside the negotiator only; it drives the retry loop
    and never reaches the pipeline boundary.
    """

    def __init__(self, message: str, asking_price: int, offered_price: int):
        super().__init__(
            message,
            context={'asking_price': asking_price, 'offered_price': offered_price},
        )
        self.asking_price = asking_price
        self.offered_price = offered_price


class DealError(DealPromoterError):
    """Unrecoverable deal negotiation failure."""

    pass


class RetriesExhaustedError(DealError):
    """Provider kept rejecting the price past the configured attempt bound."""

    pass


class PipelineError(DealPromoterError):
    """Unexpected failure at the pipeline boundary."""

    pass
