import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from structlog.testing import capture_logs

from finance_tracker.aggregation import screen_transactions
from finance_tracker.aggregation.screening import (
    MalformedTransactionError,
    calendar_datetime,
    coerce_transaction,
    month_key,
    parse_amount,
    parse_date,
    parse_type,
)
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import DEFAULT_COLOR, Category


def record(**overrides):
    base = {"amount": "10", "type": "expense", "category": "food", "date": "2025-01-15"}
    base.update(overrides)
    return base


@pytest.mark.unit
class TestScreenTransactions:
    """Test separating malformed records from usable ones"""

    def test_valid_records_pass(self, make_transaction):
        txn = make_transaction(10)

        result = screen_transactions([txn, record()])

        assert len(result.valid) == 2
        assert result.valid[0] is txn
        assert result.skipped == 0

    @pytest.mark.parametrize("bad", [
        record(amount=None),
        record(amount="ten"),
        record(amount="NaN"),
        record(amount="Infinity"),
        record(amount=-1),
        record(amount=True),
        record(type="transfer"),
        record(type=None),
        record(date=None),
        record(date=""),
        record(date="15/01/2025"),
        record(date="2025-13-01"),
        record(category=None),
        "not a record",
    ])
    def test_malformed_records_rejected(self, bad):
        result = screen_transactions([bad])

        assert result.valid == []
        assert result.skipped == 1
        assert result.rejected[0].record is bad
        assert result.rejected[0].reason

    def test_rejections_are_logged(self):
        # Arrange
        records = [record(), record(amount=-5), record(date="yesterday")]

        # Act
        with capture_logs() as logs:
            result = screen_transactions(records)

        # Assert
        assert result.skipped == 2
        warnings = [entry for entry in logs if entry["event"] == "malformed_transactions_skipped"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["skipped"] == 2
        assert len(warnings[0]["reasons"]) == 2

    def test_nothing_logged_for_clean_input(self):
        with capture_logs() as logs:
            screen_transactions([record()])

        assert logs == []

    def test_accepts_generators(self):
        result = screen_transactions(record(amount=str(i)) for i in range(3))

        assert [txn.amount for txn in result.valid] == [Decimal("0"), Decimal("1"), Decimal("2")]


@pytest.mark.unit
class TestCoerceTransaction:

    def test_mapping_with_category_object(self):
        # Arrange
        raw = {
            "id": 7,
            "amount": 12.5,
            "type": "Expense",
            "category": {"id": "transport", "name": "Transportation", "color": "#2196F3"},
            "date": "2025-03-02T08:30:00Z",
            "description": "Bus",
            "receiptUrl": "https://example.com/r.png",
        }

        # Act
        txn = coerce_transaction(raw)

        # Assert
        assert txn.id == "7"
        assert txn.amount == Decimal("12.5")
        assert txn.type == TransactionType.EXPENSE
        assert txn.category == Category("transport", "Transportation", TransactionType.EXPENSE, "#2196F3")
        assert txn.date == datetime(2025, 3, 2, 8, 30, tzinfo=timezone.utc)
        assert txn.description == "Bus"
        assert txn.receipt_url == "https://example.com/r.png"

    def test_category_string(self):
        txn = coerce_transaction(record(category="Groceries", type="income"))

        assert txn.category == Category("Groceries", "Groceries", TransactionType.INCOME, DEFAULT_COLOR)

    def test_category_mapping_without_id_uses_name(self):
        txn = coerce_transaction(record(category={"name": "Rent"}))

        assert txn.category.id == "Rent"
        assert txn.category.type == TransactionType.EXPENSE

    def test_clean_transaction_returned_unchanged(self, make_transaction):
        txn = make_transaction(5)

        assert coerce_transaction(txn) is txn

    def test_transaction_with_loose_fields_normalized(self, food):
        from finance_tracker.domain.models import Transaction

        loose = Transaction(amount="5.25", type="income", category=food, date="2025-01-02")

        txn = coerce_transaction(loose)

        assert txn.amount == Decimal("5.25")
        assert txn.type == TransactionType.INCOME
        assert txn.date == date(2025, 1, 2)

    def test_transaction_without_category_object(self):
        from finance_tracker.domain.models import Transaction

        loose = Transaction(amount=Decimal("1"), type=TransactionType.EXPENSE, category="food", date=date(2025, 1, 1))

        with pytest.raises(MalformedTransactionError):
            coerce_transaction(loose)


@pytest.mark.unit
class TestParsers:

    @pytest.mark.parametrize("value, expected", [
        ("12.50", Decimal("12.50")),
        (" 3 ", Decimal("3")),
        (0, Decimal("0")),
        (1.1, Decimal("1.1")),
        (Decimal("7"), Decimal("7")),
    ])
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", ["INCOME", " income ", TransactionType.INCOME])
    def test_parse_type(self, value):
        assert parse_type(value) == TransactionType.INCOME

    def test_parse_date_only(self):
        assert parse_date("2025-01-31") == date(2025, 1, 31)

    def test_parse_datetime_with_offset(self):
        parsed = parse_date("2025-01-31T23:30:00-05:00")

        assert parsed == datetime(2025, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

    def test_parse_date_passes_dates_through(self):
        today = date(2025, 6, 1)

        assert parse_date(today) is today

    def test_calendar_datetime_keeps_wall_clock(self):
        aware = datetime(2025, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert calendar_datetime(aware) == datetime(2025, 1, 31, 23, 30)
        assert calendar_datetime(date(2025, 1, 31)) == datetime(2025, 1, 31)

    def test_month_key_uses_date_as_given(self):
        aware = datetime(2025, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert month_key(aware) == "2025-01"
        assert month_key(date(2024, 12, 1)) == "2024-12"
