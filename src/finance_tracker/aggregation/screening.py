"""
Input screening for the aggregation engine.

Every engine function runs its input through :func:`screen_transactions`
first. Records arrive either as ``Transaction`` objects or as plain
mappings (JSON-like dicts, ISO date strings); anything that cannot be
turned into a well-formed transaction is set aside and counted.
"""
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Union

import structlog

from finance_tracker.aggregation.models import RejectedRecord, ScreenResult
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import DEFAULT_COLOR, Category, DateLike, Transaction

logger = structlog.get_logger(__name__)

TransactionRecord = Union[Transaction, Mapping[str, Any]]


class MalformedTransactionError(ValueError):
    """Raised when a record cannot be read as a transaction."""
    pass


def parse_amount(value: Any) -> Decimal:
    """Read a non-negative, finite amount as a Decimal"""
    if value is None or isinstance(value, bool):
        raise MalformedTransactionError(f"invalid amount: {value!r}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise MalformedTransactionError(f"invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise MalformedTransactionError(f"amount is not finite: {value!r}")
    if amount < 0:
        raise MalformedTransactionError(f"amount is negative: {value!r}")

    return amount


def parse_type(value: Any) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError:
        raise MalformedTransactionError(f"unrecognized type: {value!r}") from None


def parse_date(value: Any) -> DateLike:
    """
    Read a date or datetime, accepting ISO 8601 strings.

    Date-only strings stay dates; a trailing 'Z' is read as UTC.
    """
    if isinstance(value, (date, datetime)):
        return value

    if not isinstance(value, str) or not value.strip():
        raise MalformedTransactionError(f"missing or invalid date: {value!r}")

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError:
        raise MalformedTransactionError(f"unparseable date: {value!r}") from None


def calendar_datetime(value: DateLike) -> datetime:
    """
    Naive datetime for comparisons, taken from the value as given.

    Aware datetimes keep their wall-clock time; the offset is dropped
    rather than converted.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def month_key(value: DateLike) -> str:
    """YYYY-MM key of the value's own calendar date"""
    return f"{value.year:04d}-{value.month:02d}"


def _parse_category(value: Any, transaction_type: TransactionType) -> Category:
    if isinstance(value, Category):
        return value

    if isinstance(value, Mapping):
        category_id = value.get("id") or value.get("name")
        if not category_id:
            raise MalformedTransactionError(f"category has no id: {value!r}")
        return Category(
            id=str(category_id),
            name=str(value.get("name") or category_id),
            type=parse_type(value["type"]) if value.get("type") else transaction_type,
            color=str(value.get("color") or DEFAULT_COLOR),
        )

    if isinstance(value, str) and value.strip():
        return Category(id=value.strip(), name=value.strip(), type=transaction_type)

    raise MalformedTransactionError(f"missing or invalid category: {value!r}")


def coerce_transaction(record: TransactionRecord) -> Transaction:
    """
    Turn a record into a well-formed Transaction.

    Args:
        record: A Transaction, or a mapping with amount/type/category/date keys

    Returns:
        Transaction with a Decimal amount, enum type and date value

    Raises:
        MalformedTransactionError: If amount, type, category or date is unusable
    """
    if isinstance(record, Transaction):
        amount = parse_amount(record.amount)
        transaction_type = parse_type(record.type)
        transaction_date = parse_date(record.date)
        if not isinstance(record.category, Category):
            raise MalformedTransactionError(f"invalid category: {record.category!r}")

        if (
            amount is record.amount
            and transaction_type is record.type
            and transaction_date is record.date
        ):
            return record
        return replace(record, amount=amount, type=transaction_type, date=transaction_date)

    if not isinstance(record, Mapping):
        raise MalformedTransactionError(f"not a transaction record: {type(record).__name__}")

    transaction_type = parse_type(record.get("type"))
    return Transaction(
        id=str(record["id"]) if record.get("id") is not None else None,
        amount=parse_amount(record.get("amount")),
        type=transaction_type,
        category=_parse_category(record.get("category"), transaction_type),
        date=parse_date(record.get("date")),
        description=str(record.get("description") or ""),
        receipt_url=record.get("receipt_url") or record.get("receiptUrl"),
    )


def screen_transactions(records: Iterable[TransactionRecord]) -> ScreenResult:
    """
    Split records into well-formed transactions and rejected ones.

    Never raises for bad records; each rejection is logged and counted.
    """
    result = ScreenResult()

    for record in records:
        try:
            result.valid.append(coerce_transaction(record))
        except MalformedTransactionError as e:
            result.rejected.append(RejectedRecord(record=record, reason=str(e)))

    if result.rejected:
        logger.warning(
            "malformed_transactions_skipped",
            skipped=result.skipped,
            reasons=[rejected.reason for rejected in result.rejected[:5]],
        )

    return result
