"""Domain exceptions raised by the generation pipeline.

Route handlers translate these into HTTP responses.
"""

from fastapi import status


class EntitlementError(Exception):
    """Caller is not entitled to perform the action."""

    status_code: int = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InsufficientCreditsError(EntitlementError):
    """Caller has no remaining credits."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED


class TripTooLongError(EntitlementError):
    """Trip exceeds the day cap of the caller's tier."""

    status_code = status.HTTP_403_FORBIDDEN


class ProviderError(Exception):
    """A single provider attempt failed (HTTP error, API error, empty content)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"[{provider}] {message}")
        self.provider = provider
        self.message = message


class GenerationFailedError(Exception):
    """Both the primary and the fallback provider failed."""


class InvalidAIOutputError(GenerationFailedError):
    """Model text could not be parsed as an itinerary."""

    def __init__(self, message: str, raw_output: str = "") -> None:
        super().__init__(message)
        self.raw_output = raw_output
