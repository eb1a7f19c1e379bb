import pytest
from decimal import Decimal

from finance_tracker.presentation.formatting import (
    FormatOptions,
    format_currency,
    format_month_label,
    format_percentage,
)


@pytest.mark.unit
class TestFormatCurrency:

    @pytest.mark.parametrize("amount, options, expected", [
        (Decimal("1234.5"), FormatOptions("USD"), "$1,234.50"),
        (Decimal("-1234.5"), FormatOptions("USD"), "-$1,234.50"),
        (0, FormatOptions("EUR"), "€0.00"),
        (Decimal("50000"), FormatOptions("INR"), "₹50,000.00"),
        (Decimal("1999.999"), FormatOptions("JPY", decimals=0), "¥2,000"),
        (Decimal("12"), FormatOptions("chf"), "CHF 12.00"),
    ])
    def test_format_currency(self, amount, options, expected):
        assert format_currency(amount, options) == expected

    def test_default_options(self):
        assert format_currency(Decimal("3")) == "$3.00"


@pytest.mark.unit
class TestFormatOptions:

    def test_from_settings(self):
        assert FormatOptions.from_settings({"currency": "INR"}) == FormatOptions("INR")

    def test_from_settings_override(self):
        assert FormatOptions.from_settings({"currency": "INR"}, currency="GBP").symbol == "£"

    def test_from_empty_settings(self):
        assert FormatOptions.from_settings({}).currency == "USD"


@pytest.mark.unit
class TestLabels:

    @pytest.mark.parametrize("month, expected", [
        ("2025-01", "Jan 2025"),
        ("2024-12", "Dec 2024"),
        ("not-a-month", "not-a-month"),
        ("2025-13", "2025-13"),
    ])
    def test_format_month_label(self, month, expected):
        assert format_month_label(month) == expected

    @pytest.mark.parametrize("value, expected", [
        (50, "50%"),
        (Decimal("66.666"), "67%"),
        (Decimal("100"), "100%"),
    ])
    def test_format_percentage(self, value, expected):
        assert format_percentage(value) == expected
