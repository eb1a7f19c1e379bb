"""
Formatting at the presentation boundary.

The aggregation engine only ever deals in plain Decimal amounts; whoever
displays them passes an explicit FormatOptions value instead of reading
currency settings from some global.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Union

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "CNY": "CN¥",
}


@dataclass(frozen=True)
class FormatOptions:
    """How amounts are rendered for display"""
    currency: str = "USD"
    decimals: int = 2

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS.get(self.currency.upper(), f"{self.currency.upper()} ")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], currency: Optional[str] = None) -> "FormatOptions":
        """Build options from the settings config, with an optional currency override"""
        return cls(currency=currency or settings.get("currency", "USD"))


def format_currency(amount: Union[Decimal, int], options: FormatOptions = FormatOptions()) -> str:
    """
    Format an amount with currency symbol and thousands separators.

    Example:
        format_currency(Decimal("-1234.5"), FormatOptions("USD")) -> '-$1,234.50'
    """
    amount = Decimal(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}{options.symbol}{abs(amount):,.{options.decimals}f}"


def format_month_label(month: str) -> str:
    """Turn a YYYY-MM key into a short label like 'Jan 2025'"""
    try:
        year, month_number = month.split("-")
        return date(int(year), int(month_number), 1).strftime("%b %Y")
    except ValueError:
        return month


def format_percentage(value: Union[Decimal, int, float]) -> str:
    return f"{Decimal(str(value)):.0f}%"
