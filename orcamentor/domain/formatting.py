"""Display formatting for money and dates (Brazilian convention)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


def format_number(value: Decimal) -> str:
    """Two decimals, ``.`` for thousands and ``,`` for the fraction: ``1.234,56``."""
    quantized = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    text = f"{quantized:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_money(value: Decimal) -> str:
    return f"R$ {format_number(value)}"


def parse_date(value: str) -> date | None:
    """Parse an ISO date or datetime string; None when unreadable."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def format_date(value: str) -> str:
    """``dd/mm/YYYY`` for a stored date string; unparseable input is shown as-is."""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")
