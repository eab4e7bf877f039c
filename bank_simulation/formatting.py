"""
Display formatting for amounts, timestamps and history lines.

Pure functions; the account core never calls them.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Union

from .accounts import TransactionRecord
from .currency import Currency, Money

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _display_currency(value, currency: Optional[Currency]) -> Currency:
    if isinstance(value, Money):
        return value.currency
    return currency or Currency.USD


def format_amount(value: Union[Money, Decimal, str, int],
                  currency: Optional[Currency] = None) -> str:
    """
    Plain display string at the currency precision, e.g. '1250.50' for USD
    or '1126' for JPY. Money carries its own currency; bare values default
    to USD.
    """
    currency = _display_currency(value, currency)
    if isinstance(value, Money):
        value = value.amount
    elif not isinstance(value, Decimal):
        value = Decimal(str(value))
    return str(value.quantize(currency.quantum, rounding=ROUND_HALF_UP))


def format_money(value: Union[Money, Decimal, str, int],
                 currency: Optional[Currency] = None) -> str:
    """Amount prefixed with the currency symbol, e.g. '$1250.50' or '€99.99'"""
    currency = _display_currency(value, currency)
    return f"{currency.symbol}{format_amount(value, currency)}"


def format_timestamp(moment: datetime, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    """Format a commit time in local time; naive datetimes are taken as-is"""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime(fmt)


def format_history_entry(record: TransactionRecord, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    """
    One history line:

        [2026-10-19 09:30:00] DEPOSIT   : $250.50     | New Balance: $1250.50 | Standard Deposit
    """
    symbol = record.amount.currency.symbol
    return "[{}] {:<10}: {}{:<10} | New Balance: {}{} | {}".format(
        format_timestamp(record.timestamp, fmt),
        record.kind.name,
        symbol,
        format_amount(record.amount),
        symbol,
        format_amount(record.resulting_balance),
        record.label,
    )


def format_history(account_number: str, records: Iterable[TransactionRecord],
                   fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> List[str]:
    """History block with header and footer"""
    lines = [f"--- TRANSACTION HISTORY for Account {account_number} ---"]
    records = list(records)
    if not records:
        lines.append("No transactions recorded yet.")
        return lines
    lines.extend(format_history_entry(record, fmt) for record in records)
    lines.append("--- END OF HISTORY ---")
    return lines
