"""Public interface for the fx_gmc package."""

from __future__ import annotations

from datetime import datetime
from importlib import metadata as importlib_metadata
from typing import TYPE_CHECKING

from fx_gmc.errors import (
    ExtractionError,
    FetchError,
    GMCError,
    ParseError,
    RateUnavailableError,
    UnsupportedTargetError,
    ValidationError,
)
from fx_gmc.ingestion.gmc import DEFAULT_TIMEOUT, GMC_URL, extract
from fx_gmc.ingestion.models import CurrencyRate, ExtractionResult, Which

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    import requests

__all__ = [
    "__version__",
    "TARGET_CURRENCY",
    "CurrencyRate",
    "CurrencyService",
    "ExtractionResult",
    "GMCError",
    "ExtractionError",
    "FetchError",
    "ParseError",
    "ValidationError",
    "UnsupportedTargetError",
    "RateUnavailableError",
    "get_currencies",
    "convert_currency",
]

try:
    __version__ = importlib_metadata.version("fx-gmc")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"

TARGET_CURRENCY = "IDR"
_RATE_SELECTORS = ("buy", "sell")


class CurrencyService:
    """Converts foreign currencies to IDR using GMC rates.

    The first successful extraction is kept on the instance and reused by
    later conversions. Call :meth:`refresh` to fetch the page again.
    """

    __slots__ = ("session", "url", "timeout", "_result")

    def __init__(
        self,
        *,
        session: "requests.Session | None" = None,
        url: str = GMC_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session
        self.url = url
        self.timeout = timeout
        self._result: ExtractionResult | None = None

    @property
    def result(self) -> ExtractionResult | None:
        """The cached extraction, or ``None`` before the first success."""

        return self._result

    def refresh(self, html: str | None = None, *, now: datetime | None = None) -> ExtractionResult:
        """Extract rates again and replace the cached result.

        ``html`` lets callers supply a page fetched elsewhere. On failure the
        previous result, if any, is kept.
        """

        result = extract(html, session=self.session, url=self.url, timeout=self.timeout, now=now)
        self._result = result
        return result

    def get_currencies(self) -> ExtractionResult:
        """Return the cached extraction, fetching the page on first use."""

        if self._result is None:
            return self.refresh()
        return self._result

    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str = TARGET_CURRENCY,
        which: Which = "sell",
    ) -> float | None:
        """Convert ``amount`` of ``from_currency`` into IDR.

        Returns ``None`` when GMC does not list ``from_currency``. Raises
        :class:`UnsupportedTargetError` for any target other than IDR and
        :class:`RateUnavailableError` when the rate page cannot be extracted.
        """

        if to_currency.upper() != TARGET_CURRENCY:
            raise UnsupportedTargetError(to_currency)
        if which not in _RATE_SELECTORS:
            raise ValueError("which must be one of: buy, sell")

        try:
            result = self.get_currencies()
        except ExtractionError as exc:
            raise RateUnavailableError(exc) from exc

        rate = result.get(from_currency)
        if rate is None:
            return None
        return amount * rate.select(which)


def get_currencies(
    html: str | None = None,
    *,
    session: "requests.Session | None" = None,
    now: datetime | None = None,
) -> ExtractionResult:
    """Extract the GMC rate table, fetching the page unless ``html`` is given."""

    return extract(html, session=session, now=now)


def convert_currency(
    amount: float,
    from_currency: str,
    to_currency: str,
    which: Which = "sell",
    *,
    service: CurrencyService | None = None,
) -> float | None:
    """Convert ``amount`` into IDR.

    Without ``service`` the rate page is fetched for this call only; pass a
    :class:`CurrencyService` to reuse rates across conversions.
    """

    return (service or CurrencyService()).convert(amount, from_currency, to_currency, which)
