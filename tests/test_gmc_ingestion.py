from __future__ import annotations

from datetime import datetime

import pytest
import requests

from fx_gmc.errors import ExtractionError, FetchError, ParseError, ValidationError
from fx_gmc.ingestion.gmc import (
    GMC_TIMEZONE,
    GMC_URL,
    _parse_number,
    extract,
    fetch_page,
    parse_rate_table,
)
from fx_gmc.ingestion.models import CurrencyRate

PAGE = """
<html><body>
<table id="rate-table">
    <thead>
        <tr><th>Currency</th><th>Buy</th><th>Sell</th></tr>
    </thead>
    <tbody>
        <tr><td>Rate</td><td>Buy</td><td>Sell</td></tr>
        <tr><td>USD</td><td>14,000.00</td><td>14,200.50</td></tr>
        <tr><td>SGD</td><td>10,450.00</td><td>10,600.00</td></tr>
        <tr><td> <b>EUR</b> </td><td>15,800.25</td><td>16,050.75</td></tr>
        <tr><td>usd</td><td>1.00</td><td>2.00</td></tr>
        <tr><td>US</td><td>1.00</td><td>2.00</td></tr>
        <tr><td>USDX</td><td>1.00</td><td>2.00</td></tr>
        <tr><td colspan="3">Rates may change without notice</td></tr>
    </tbody>
</table><br><a>15-Oktober 10:30</a>
</body></html>
"""


def _page(*rows: tuple[str, ...]) -> str:
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f'<table id="rate-table"><tbody>{body}</tbody></table>'


def _response(status: int, body: str = "", reason: str = "OK") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = GMC_URL
    return response


class _FakeSession:
    def __init__(self, response: requests.Response | None = None, exc: Exception | None = None):
        self.response = response
        self.exc = exc
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


def test_parse_rate_table_keeps_only_currency_rows() -> None:
    result = parse_rate_table(PAGE, now=datetime(2024, 10, 20, tzinfo=GMC_TIMEZONE))

    assert set(result.currencies) == {"USD", "SGD", "EUR"}
    assert result.currencies["USD"] == CurrencyRate(buy=14000.0, sell=14200.5)
    assert result.currencies["EUR"].sell == 16050.75
    assert result.updated_at == datetime(2024, 10, 15, 10, 30, tzinfo=GMC_TIMEZONE)
    assert result.source_url is None


def test_parse_rate_table_later_duplicate_wins() -> None:
    html = _page(
        ("USD", "14,000.00", "14,200.00"),
        ("SGD", "10,450.00", "10,600.00"),
        ("JPY", "95.10", "97.40"),
        ("USD", "14,100.00", "14,300.00"),
    )

    result = parse_rate_table(html)

    assert len(result.currencies) == 3
    assert result.currencies["USD"] == CurrencyRate(buy=14100.0, sell=14300.0)


def test_parse_rate_table_rejects_too_few_currencies() -> None:
    html = _page(
        ("USD", "14,000.00", "14,200.00"),
        ("SGD", "10,450.00", "10,600.00"),
        ("Total", "1", "2"),
    )

    with pytest.raises(ValidationError, match="too few currencies"):
        parse_rate_table(html)


def test_parse_rate_table_requires_rate_table_body() -> None:
    with pytest.raises(ParseError):
        parse_rate_table("<table id='other'><tbody><tr><td>USD</td></tr></tbody></table>")

    with pytest.raises(ParseError):
        parse_rate_table("<table id='rate-table'><tr><td>USD</td><td>1</td><td>2</td></tr></table>")


def test_parse_rate_table_skips_unparseable_and_short_rows() -> None:
    html = _page(
        ("USD", "14,000.00", "14,200.00"),
        ("SGD", "10,450.00", "10,600.00"),
        ("JPY", "95.10", "97.40"),
        ("CNY", "-", "2,100.00"),
        ("AUD", "9,800.00"),
    )

    result = parse_rate_table(html)

    assert set(result.currencies) == {"USD", "SGD", "JPY"}


def test_parse_rate_table_is_repeatable() -> None:
    first = parse_rate_table(PAGE)
    second = parse_rate_table(PAGE)

    assert first.currencies == second.currencies


def test_extraction_errors_share_base_class() -> None:
    with pytest.raises(ExtractionError):
        parse_rate_table("<html></html>")


def test_parse_number_handles_english_grouping() -> None:
    assert _parse_number("14,000.00") == 14000.0
    assert _parse_number(" 1,234,567.5 ") == 1234567.5
    assert _parse_number("95") == 95.0
    assert _parse_number(".5") == 0.5
    assert _parse_number("") is None
    assert _parse_number("-") is None
    assert _parse_number("14.000,00") is None
    assert _parse_number("1,23") is None
    assert _parse_number("-5.00") is None
    assert _parse_number("+5") is None
    assert _parse_number("1.") is None
    assert _parse_number("1e3") is None


def test_fetch_page_returns_body() -> None:
    session = _FakeSession(_response(200, "<html>ok</html>"))

    assert fetch_page(session=session, timeout=5) == "<html>ok</html>"
    assert session.calls == [(GMC_URL, 5)]


def test_fetch_page_reports_http_status() -> None:
    session = _FakeSession(_response(503, reason="Service Unavailable"))

    with pytest.raises(FetchError) as excinfo:
        fetch_page(session=session)

    assert excinfo.value.status_code == 503
    assert "Service Unavailable" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_fetch_page_wraps_connection_errors() -> None:
    session = _FakeSession(exc=requests.ConnectionError("connection refused"))

    with pytest.raises(FetchError, match="connection refused") as excinfo:
        fetch_page(session=session)

    assert excinfo.value.status_code is None
    assert len(session.calls) == 1


def test_extract_uses_supplied_html_without_network() -> None:
    session = _FakeSession(exc=AssertionError("network must not be used"))

    result = extract(PAGE, session=session)

    assert "USD" in result.currencies
    assert session.calls == []


def test_extract_fetches_when_html_missing() -> None:
    session = _FakeSession(_response(200, PAGE))

    result = extract(session=session, url="https://example.com/rates")

    assert result.source_url == "https://example.com/rates"
    assert session.calls == [("https://example.com/rates", 30)]
    assert result.currencies["SGD"].buy == 10450.0


def test_extraction_result_as_dict() -> None:
    result = parse_rate_table(PAGE, now=datetime(2024, 10, 20, tzinfo=GMC_TIMEZONE))

    payload = result.as_dict()

    assert list(payload["currencies"]) == ["EUR", "SGD", "USD"]
    assert payload["currencies"]["USD"] == {"buy": 14000.0, "sell": 14200.5}
    assert payload["mtime"] == int(datetime(2024, 10, 15, 10, 30, tzinfo=GMC_TIMEZONE).timestamp())


def test_extraction_result_as_dict_omits_unknown_mtime() -> None:
    html = _page(
        ("USD", "1", "2"),
        ("SGD", "1", "2"),
        ("JPY", "1", "2"),
    )

    assert "mtime" not in parse_rate_table(html).as_dict()
