"""Ingestion helpers for the GMC (Golden Money Changer) rate page."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Final

import requests
from bs4 import BeautifulSoup

from fx_gmc.errors import FetchError, ParseError, ValidationError
from fx_gmc.ingestion.models import CurrencyRate, ExtractionResult
from fx_gmc.utils.logger import get_logger
from fx_gmc.utils.months import month_number

LOGGER = get_logger(__name__)

GMC_URL: Final[str] = "https://www.gmc.co.id/"
DEFAULT_TIMEOUT: Final[int] = 30
USER_AGENT: Final[str] = "fx-gmc-ingestor/1.0"
RATE_TABLE_SELECTOR: Final[str] = "table#rate-table tbody"
MIN_CURRENCIES: Final[int] = 3
# GMC publishes its update time in Western Indonesian Time without a year.
GMC_TIMEZONE: Final[timezone] = timezone(timedelta(hours=7), "WIB")

_CURRENCY_CODE_PATTERN = re.compile(r"\A[A-Z]{3}\Z")
_NUMBER_PATTERN = re.compile(r"\A(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|\.\d+)\Z")
_RATE_TABLE_START_PATTERN = re.compile(
    r"""<table\b[^>]*\bid\s*=\s*["']?rate-table["'\s>/]""", re.IGNORECASE
)
_TABLE_END_PATTERN = re.compile(r"</table\s*>", re.IGNORECASE)
_UPDATE_TIME_PATTERN = re.compile(
    r"</table\s*>\s*<br\s*/?>\s*<a\b[^>]*>\s*"
    r"(\d{1,2})-([A-Za-z]+)\.?\s+(\d{1,2}):(\d{2})\s*</a>",
    re.IGNORECASE,
)


def _cell_text(cell) -> str:
    return " ".join(cell.stripped_strings).strip()


def _parse_number(text: str) -> float | None:
    """Parse English formatted numbers such as ``14,200.50``.

    Deliberately narrower than a general number parser: signs, exponents
    and a trailing decimal point (``1.``) are rejected. Returns ``None`` when
    ``text`` is not a plain non-negative number.
    """

    cleaned = text.strip()
    if not _NUMBER_PATTERN.match(cleaned):
        return None
    return float(cleaned.replace(",", ""))


def _reference_time(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(GMC_TIMEZONE)
    if now.tzinfo is None:
        return now.replace(tzinfo=GMC_TIMEZONE)
    return now.astimezone(GMC_TIMEZONE)


def parse_update_time(html: str, *, now: datetime | None = None) -> datetime | None:
    """Recover the ``DD-Month HH:MM`` update time printed below the rate table.

    Only the fragment directly after the closing tag of ``#rate-table`` is
    read. The page omits the year, so the date is tried in the current and in
    the previous year and whichever lies closer to ``now`` is returned. Any
    failure is logged and reported as ``None``.
    """

    match = None
    start = _RATE_TABLE_START_PATTERN.search(html)
    end = _TABLE_END_PATTERN.search(html, start.end()) if start else None
    if end is not None:
        match = _UPDATE_TIME_PATTERN.match(html, end.start())
    if not match:
        LOGGER.warning("No update time found after the GMC rate table")
        return None

    day, month_name, hour, minute = match.groups()
    month = month_number(month_name)
    if month is None:
        LOGGER.warning("Unknown month name %r in GMC update time %r", month_name, match.group(0))
        return None

    reference = _reference_time(now)
    candidates: list[datetime] = []
    for year in (reference.year, reference.year - 1):
        try:
            candidates.append(
                datetime(year, month, int(day), int(hour), int(minute), tzinfo=GMC_TIMEZONE)
            )
        except ValueError:
            LOGGER.debug("GMC update time %s-%s does not exist in %s", day, month_name, year)
            continue
    if not candidates:
        LOGGER.warning("Ignoring invalid GMC update time %r", match.group(0))
        return None
    return min(candidates, key=lambda candidate: abs(candidate - reference))


def parse_rate_table(
    html: str,
    *,
    now: datetime | None = None,
    source_url: str | None = None,
) -> ExtractionResult:
    """Parse the GMC homepage HTML into an :class:`ExtractionResult`.

    Only rows whose first cell is a three-letter uppercase code are treated as
    rates, which skips header and decorative rows without relying on markup.
    When a code repeats, the later row wins.
    """

    soup = BeautifulSoup(html, "html.parser")
    tbody = soup.select_one(RATE_TABLE_SELECTOR)
    if tbody is None:
        raise ParseError(f"Rate table ({RATE_TABLE_SELECTOR}) not found in GMC page")

    currencies: dict[str, CurrencyRate] = {}
    for tr in tbody.find_all("tr"):
        cells = [_cell_text(td) for td in tr.find_all("td")]
        if not cells or not _CURRENCY_CODE_PATTERN.match(cells[0]):
            continue
        code = cells[0]
        if len(cells) < 3:
            LOGGER.debug("Skipping %s row with only %s cells", code, len(cells))
            continue
        buy, sell = _parse_number(cells[1]), _parse_number(cells[2])
        if buy is None or sell is None:
            LOGGER.warning("Skipping %s row with unparseable rates %r / %r", code, cells[1], cells[2])
            continue
        currencies[code] = CurrencyRate(buy=buy, sell=sell)

    if len(currencies) < MIN_CURRENCIES:
        raise ValidationError(
            f"Check: no/too few currencies found ({len(currencies)} < {MIN_CURRENCIES})"
        )

    LOGGER.info("Parsed %s currencies from GMC rate table", len(currencies))
    return ExtractionResult(
        currencies=currencies,
        updated_at=parse_update_time(html, now=now),
        source_url=source_url,
    )


def _raise_with_context(response: requests.Response, url: str) -> None:
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        status = response.status_code
        reason = response.reason or "HTTP error"
        raise FetchError(f"Can't retrieve GMC page ({url}): {reason}", status_code=status) from exc


def fetch_page(
    url: str = GMC_URL,
    *,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Download the GMC page with a single blocking GET and return its HTML."""

    sess = session or requests.Session()
    if session is None:
        sess.headers.update({"User-Agent": USER_AGENT})
    try:
        try:
            response = sess.get(url, timeout=timeout)
        except requests.RequestException as exc:
            raise FetchError(f"Can't retrieve GMC page ({url}): {exc}") from exc
        _raise_with_context(response, url)
    finally:
        if session is None:
            sess.close()
    LOGGER.info("Fetched GMC rate page from %s", url)
    return response.text


def extract(
    html: str | None = None,
    *,
    session: requests.Session | None = None,
    url: str = GMC_URL,
    timeout: float = DEFAULT_TIMEOUT,
    now: datetime | None = None,
) -> ExtractionResult:
    """Return GMC rates from ``html`` or, when omitted, from a live fetch of ``url``."""

    source_url = None
    if html is None:
        html = fetch_page(url, session=session, timeout=timeout)
        source_url = url
    return parse_rate_table(html, now=now, source_url=source_url)


__all__ = [
    "GMC_URL",
    "GMC_TIMEZONE",
    "DEFAULT_TIMEOUT",
    "MIN_CURRENCIES",
    "extract",
    "fetch_page",
    "parse_rate_table",
    "parse_update_time",
]
