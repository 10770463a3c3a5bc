"""Data models shared across ingestion modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping

Which = Literal["buy", "sell"]


@dataclass(frozen=True, slots=True)
class CurrencyRate:
    """IDR paid (``buy``) and charged (``sell``) per unit of a foreign currency."""

    buy: float
    sell: float

    def select(self, which: Which) -> float:
        return self.buy if which == "buy" else self.sell


CurrencyTable = Mapping[str, CurrencyRate]


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Currencies scraped from a single GMC page plus its last-update time."""

    currencies: CurrencyTable
    updated_at: datetime | None = None
    source_url: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        # Read-only copy of the table.
        object.__setattr__(self, "currencies", MappingProxyType(dict(self.currencies)))

    def get(self, code: str) -> CurrencyRate | None:
        """Return the rate listed for ``code`` (case-insensitive), if any."""

        return self.currencies.get(code.upper())

    def as_dict(self) -> Dict[str, Any]:
        """Return the plain ``{"currencies": ..., "mtime": ...}`` payload."""

        payload: Dict[str, Any] = {
            "currencies": {
                code: {"buy": rate.buy, "sell": rate.sell}
                for code, rate in sorted(self.currencies.items())
            }
        }
        if self.updated_at is not None:
            payload["mtime"] = int(self.updated_at.timestamp())
        return payload


__all__ = ["CurrencyRate", "CurrencyTable", "ExtractionResult", "Which"]
