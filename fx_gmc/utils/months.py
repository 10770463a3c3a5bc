"""Month-name lookup for the dates printed on Indonesian web pages."""

from __future__ import annotations

from typing import Final

INDONESIAN_MONTHS: Final[tuple[str, ...]] = (
    "januari",
    "februari",
    "maret",
    "april",
    "mei",
    "juni",
    "juli",
    "agustus",
    "september",
    "oktober",
    "november",
    "desember",
)

ENGLISH_MONTHS: Final[tuple[str, ...]] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


def _build_lookup() -> dict[str, int]:
    lookup: dict[str, int] = {}
    for names in (ENGLISH_MONTHS, INDONESIAN_MONTHS):
        for number, name in enumerate(names, start=1):
            lookup[name] = number
            lookup[name[:3]] = number
    # Older spellings and short forms that are not plain three-letter prefixes.
    lookup.update({"pebruari": 2, "peb": 2, "agt": 8, "sept": 9, "nopember": 11, "nop": 11})
    return lookup


_MONTH_LOOKUP: Final[dict[str, int]] = _build_lookup()


def month_number(name: str) -> int | None:
    """Return the month number (1-12) for ``name`` or ``None`` if unknown.

    Both Indonesian (``Januari``, ``Agustus``, ``Des``) and English month names
    are accepted, ignoring case and a trailing full stop.
    """

    key = name.strip().rstrip(".").lower()
    if not key:
        return None
    return _MONTH_LOOKUP.get(key)


__all__ = ["INDONESIAN_MONTHS", "ENGLISH_MONTHS", "month_number"]
