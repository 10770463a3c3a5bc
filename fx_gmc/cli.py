"""Command line access to GMC rates and IDR conversions."""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from fx_gmc import TARGET_CURRENCY, CurrencyService
from fx_gmc.errors import ExtractionError, RateUnavailableError, UnsupportedTargetError
from fx_gmc.ingestion.gmc import GMC_URL
from fx_gmc.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "parse_args", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fx-gmc",
        description="Convert currency using the GMC (Golden Money Changer) website",
    )
    parser.add_argument("--url", default=GMC_URL, help="Rate page to scrape")
    subparsers = parser.add_subparsers(dest="command", required=True)

    rates = subparsers.add_parser("rates", help="Show the current GMC rate table")
    rates.add_argument("--json", action="store_true", help="Print the table as JSON")

    convert = subparsers.add_parser("convert", help="Convert an amount into IDR")
    convert.add_argument("amount", type=float)
    convert.add_argument("from_currency", metavar="FROM")
    convert.add_argument("to_currency", metavar="TO", nargs="?", default=TARGET_CURRENCY)
    convert.add_argument(
        "--which",
        choices=("buy", "sell"),
        default="sell",
        help="Select which rate to use (default is sell)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _print_rates(service: CurrencyService, as_json: bool) -> int:
    try:
        result = service.get_currencies()
    except ExtractionError as exc:
        LOGGER.error("Can't get currencies: %s", exc)
        return 1

    if as_json:
        print(json.dumps(result.as_dict(), indent=2))
        return 0

    for code, rate in sorted(result.currencies.items()):
        print(f"{code}  {rate.buy:>14,.2f}  {rate.sell:>14,.2f}")
    if result.updated_at is not None:
        print(f"Updated {result.updated_at.isoformat()}")
    return 0


def _print_conversion(service: CurrencyService, args: argparse.Namespace) -> int:
    try:
        converted = service.convert(args.amount, args.from_currency, args.to_currency, args.which)
    except UnsupportedTargetError as exc:
        build_parser().error(str(exc))
    except RateUnavailableError as exc:
        LOGGER.error("%s", exc)
        return 1

    if converted is None:
        print(f"No GMC rate available for {args.from_currency.upper()}")
        return 1
    print(f"{converted:,.2f} {TARGET_CURRENCY}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    service = CurrencyService(url=args.url)
    if args.command == "rates":
        return _print_rates(service, args.json)
    return _print_conversion(service, args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
