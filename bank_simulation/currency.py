"""
Currency and Money Module

Handles ISO 4217 currency codes and exact Decimal precision for account
amounts. NEVER stores float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from dataclasses import dataclass
from enum import Enum
from typing import Union
import re

# Set global decimal context for financial precision
getcontext().prec = 28


class Currency(Enum):
    """ISO 4217 Currency Codes with precision and display symbol"""
    USD = ("USD", 2, "$")     # US Dollar, 2 decimal places
    EUR = ("EUR", 2, "€")     # Euro, 2 decimal places
    GBP = ("GBP", 2, "£")     # British Pound, 2 decimal places
    JPY = ("JPY", 0, "¥")     # Japanese Yen, 0 decimal places
    CAD = ("CAD", 2, "CA$")   # Canadian Dollar, 2 decimal places
    CHF = ("CHF", 2, "CHF ")  # Swiss Franc, 2 decimal places

    def __init__(self, code: str, precision: int, symbol: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol

    @property
    def quantum(self) -> Decimal:
        """Smallest representable amount, e.g. Decimal('0.01') for USD"""
        return Decimal('0.1') ** self.precision


AmountLike = Union['Money', Decimal, int, float, str]


def _quantize(amount: Decimal, currency: Currency) -> Decimal:
    try:
        return amount.quantize(currency.quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount {amount} is out of range for {currency.code}")


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and proper precision.
    All monetary values MUST use this class or raw Decimal.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            # str() first so floats keep their shortest repr (250.5, not 250.4999...)
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        object.__setattr__(self, 'amount', _quantize(self.amount, self.currency))

    @classmethod
    def zero(cls, currency: Currency) -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {verb} {self.currency.code} and {other.currency.code}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_string(self) -> str:
        """Format for logs and messages"""
        if self.currency.precision == 0:
            return f"{self.currency.code} {self.amount:,.0f}"
        return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"


_CURRENCY_SYMBOLS = "$€£¥"
_PLAIN_NUMBER = re.compile(r'^\d+(\.\d+)?([eE][+-]?\d+)?$')


def _ungroup(integer_part: str, separator: str, original: str) -> str:
    """Remove thousands separators, which must sit between groups of three digits"""
    if separator not in integer_part:
        return integer_part
    if not re.fullmatch(r'\d{1,3}(?:%s\d{3})+' % re.escape(separator), integer_part):
        raise ValueError(f"Cannot convert '{original}' to Decimal")
    return integer_part.replace(separator, '')


def decimal_from_string(value: str) -> Decimal:
    """
    Convert a human-entered amount to Decimal

    Accepts an optional sign and leading currency symbol, thousands
    grouping with ',' or '.', and either ',' or '.' as the decimal
    separator ("$1,250.50", "1.000,50", "12,5", "1e3").

    Raises:
        ValueError: If the string is not exactly one well-formed number
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    text = value.strip()
    sign = ''
    if text[:1] in ('+', '-'):
        sign, text = text[0], text[1:].lstrip()
    if text[:1] and text[0] in _CURRENCY_SYMBOLS:
        text = text[1:].lstrip()

    if ',' in text and '.' in text:
        # Whichever separator comes last is the decimal point
        decimal_sep = ',' if text.rfind(',') > text.rfind('.') else '.'
        group_sep = '.' if decimal_sep == ',' else ','
        integer_part, _, fraction = text.rpartition(decimal_sep)
        text = f"{_ungroup(integer_part, group_sep, value)}.{fraction}"
    elif ',' in text:
        integer_part, _, fraction = text.rpartition(',')
        if text.count(',') == 1 and 1 <= len(fraction) <= 2:
            text = f"{integer_part}.{fraction}"
        else:
            text = _ungroup(text, ',', value)
    elif text.count('.') > 1:
        text = _ungroup(text, '.', value)

    if not _PLAIN_NUMBER.match(text):
        raise ValueError(f"Cannot convert '{value}' to Decimal")
    return Decimal(sign + text)


def to_money(value: AmountLike, currency: Currency) -> Money:
    """
    Coerce an amount given by a caller into Money in the given currency

    The amount is taken exactly as given: digits beyond the currency
    precision are refused, never rounded away.

    Raises:
        ValueError: If value is Money in another currency, cannot be parsed,
            is not finite, is out of range, or has more decimal places than
            the currency allows
    """
    if isinstance(value, Money):
        if value.currency != currency:
            raise ValueError(
                f"Amount currency {value.currency.code} does not match {currency.code}"
            )
        return value
    if isinstance(value, bool):
        raise ValueError("Amount must be numeric, not bool")
    if isinstance(value, str):
        decimal_value = decimal_from_string(value)
    elif isinstance(value, (Decimal, int, float)):
        decimal_value = value if isinstance(value, Decimal) else Decimal(str(value))
        if not decimal_value.is_finite():
            raise ValueError(f"Amount must be finite, got {value!r}")
    else:
        raise ValueError(f"Unsupported amount type: {type(value).__name__}")

    if _quantize(decimal_value, currency) != decimal_value:
        raise ValueError(
            f"Amount {value!r} has more than {currency.precision} decimal places for {currency.code}"
        )
    return Money(decimal_value, currency)
