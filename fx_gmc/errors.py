"""Exception hierarchy raised by the fx_gmc package."""

from __future__ import annotations


class GMCError(Exception):
    """Base class for every error raised by fx_gmc."""


class ExtractionError(GMCError):
    """Raised when the GMC rate page cannot be turned into a rate table."""


class FetchError(ExtractionError):
    """Raised when the rate page cannot be downloaded."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code} - {self.message}"


class ParseError(ExtractionError):
    """Raised when the page no longer contains the expected rate table."""


class ValidationError(ExtractionError):
    """Raised when the rate table was parsed but looks implausible."""


class UnsupportedTargetError(GMCError, ValueError):
    """Raised when a conversion targets anything other than IDR."""

    def __init__(self, currency: str) -> None:
        super().__init__(
            "Currently only conversion to IDR is supported "
            f"(you asked for conversion to '{currency}')"
        )
        self.currency = currency


class RateUnavailableError(GMCError):
    """Raised by conversions when no rate table could be obtained."""

    def __init__(self, error: ExtractionError) -> None:
        super().__init__(f"Can't get currencies: {error}")
        self.error = error


__all__ = [
    "GMCError",
    "ExtractionError",
    "FetchError",
    "ParseError",
    "ValidationError",
    "UnsupportedTargetError",
    "RateUnavailableError",
]
