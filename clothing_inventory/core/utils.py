from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

MONEY_QUANT = Decimal("0.01")


def iso_today() -> str:
    return date.today().isoformat()


def iso_now() -> str:
    # UTC, second precision.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def round_money(value: Decimal | int | float | str) -> float:
    """Round half up to cents; stored and reported amounts stay floats."""
    return float(Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP))


def date_part(value) -> str:
    """Business dates may carry a time part (``2024-01-01T10:00``); keep the day."""
    if value is None:
        return ""
    return str(value).split("T")[0]
