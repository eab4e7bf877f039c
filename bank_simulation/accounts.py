"""
Account Module

A single bank account: owns its balance and an append-only transaction
history, and exposes deposit, withdraw and query operations. Business
failures (invalid amount, insufficient funds) come back as results, never
as exceptions, and never leave a partial mutation behind.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
from enum import Enum
import threading
import uuid

from .currency import AmountLike, Currency, Money, to_money
from .events import DomainEvent, EventDispatcher, EventPayload
from .logging_config import get_logger, log_action


class TransactionKind(Enum):
    """Kinds of history entries"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class TransactionError(Enum):
    """Recoverable reasons an operation was rejected"""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"


class AccountError(ValueError):
    """Base class for account operation failures raised on request"""

    def __init__(self, message: str, error: TransactionError):
        super().__init__(message)
        self.error = error


class InvalidAmountError(AccountError):
    """Amount was zero or negative"""


class InsufficientFundsError(AccountError):
    """Withdrawal amount exceeded the current balance"""


_ERROR_EXCEPTIONS = {
    TransactionError.INVALID_AMOUNT: InvalidAmountError,
    TransactionError.INSUFFICIENT_FUNDS: InsufficientFundsError,
}


@dataclass(frozen=True)
class TransactionRecord:
    """
    Immutable history entry, committed together with the balance change
    """
    id: str
    sequence: int
    kind: TransactionKind
    amount: Money
    resulting_balance: Money
    timestamp: datetime
    label: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            'id': self.id,
            'sequence': self.sequence,
            'kind': self.kind.value,
            'amount': str(self.amount.amount),
            'resulting_balance': str(self.resulting_balance.amount),
            'currency': self.amount.currency.code,
            'timestamp': self.timestamp.isoformat(),
            'label': self.label,
        }


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a deposit or withdrawal"""
    success: bool
    balance: Money
    error: Optional[TransactionError] = None
    message: str = ""
    record: Optional[TransactionRecord] = None

    @property
    def failed(self) -> bool:
        return not self.success

    def raise_for_error(self) -> 'TransactionResult':
        """
        Raise the exception matching a failed result, for callers that
        prefer exceptions over result checks.

        Returns:
            self, when the operation succeeded

        Raises:
            InvalidAmountError: If the amount was not positive
            InsufficientFundsError: If the balance did not cover a withdrawal
        """
        if self.error is not None:
            raise _ERROR_EXCEPTIONS[self.error](self.message, self.error)
        return self


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Account:
    """
    Bank account with a non-negative balance and append-only history.

    All reads and writes go through one re-entrant lock per account, so a
    withdrawal's balance check and its mutation form a single step and the
    history order is the commit order.
    """

    INITIAL_DEPOSIT_LABEL = "Initial Deposit"
    STANDARD_DEPOSIT_LABEL = "Standard Deposit"
    WITHDRAWAL_LABEL = "Withdrawal"

    def __init__(
        self,
        account_number: str,
        initial_amount: AmountLike,
        currency: Currency = Currency.USD,
        event_dispatcher: Optional[EventDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Create an account and apply the initial funding as its first deposit

        Args:
            account_number: Unique identifier, immutable for the account's lifetime
            initial_amount: Opening deposit. A non-positive amount is rejected
                like any other deposit and leaves the account at zero balance;
                the account is still created.
            currency: Account currency
            event_dispatcher: Receives domain events after each commit or rejection
            clock: Returns the commit timestamp; defaults to UTC now

        Raises:
            ValueError: If account_number is empty or initial_amount cannot be
                read as an amount in the account currency
        """
        if not account_number or not account_number.strip():
            raise ValueError("Account number must be a non-empty string")

        self._account_number = account_number
        self._currency = currency
        self._balance = Money.zero(currency)
        self._history = []
        self._lock = threading.RLock()
        self._clock = clock or _utc_now
        self._event_dispatcher = event_dispatcher
        self.logger = get_logger("bank_simulation.accounts")

        self.opening_result = self._deposit(initial_amount, self.INITIAL_DEPOSIT_LABEL)

        self._publish_event(DomainEvent.ACCOUNT_OPENED, {
            "currency": currency.code,
            "balance": str(self._balance.amount),
            "initial_deposit_accepted": self.opening_result.success,
        })

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def balance(self) -> Money:
        """Current balance"""
        return self.get_balance()

    @property
    def last_transaction(self) -> Optional[TransactionRecord]:
        """Most recent history entry, or None before the first commit"""
        with self._lock:
            return self._history[-1] if self._history else None

    def __repr__(self) -> str:
        return f"Account({self._account_number!r}, balance={self.get_balance().to_string()})"

    def deposit(self, amount: AmountLike, label: str = STANDARD_DEPOSIT_LABEL) -> TransactionResult:
        """
        Add funds to the account

        Args:
            amount: Amount to deposit. Must be positive and carry no more
                decimal places than the currency precision.
            label: Description recorded in the history

        Returns:
            TransactionResult; on failure error is INVALID_AMOUNT and the
            account is unchanged

        Raises:
            ValueError: If amount is in another currency, unparseable, out of
                range or finer than the currency precision
        """
        return self._deposit(amount, label)

    def withdraw(self, amount: AmountLike, label: str = WITHDRAWAL_LABEL) -> TransactionResult:
        """
        Remove funds from the account if the balance covers them

        Checks run in order: the amount must be positive (INVALID_AMOUNT),
        then the balance must be at least the amount (INSUFFICIENT_FUNDS).

        Raises:
            ValueError: If amount is in another currency, unparseable, out of
                range or finer than the currency precision
        """
        money = to_money(amount, self._currency)

        with self._lock:
            if not money.is_positive():
                return self._reject(
                    "withdrawal", TransactionError.INVALID_AMOUNT, money,
                    "Withdrawal failed: Amount must be positive."
                )

            if self._balance < money:
                return self._reject(
                    "withdrawal", TransactionError.INSUFFICIENT_FUNDS, money,
                    f"Withdrawal failed: Insufficient funds. Requested: {money.to_string()}, "
                    f"Available: {self._balance.to_string()}"
                )

            record = self._commit(TransactionKind.WITHDRAWAL, money, self._balance - money, label)
            self._commit_notify(DomainEvent.WITHDRAWAL_POSTED, record)
            return TransactionResult(success=True, balance=self._balance, record=record)

    def get_balance(self) -> Money:
        """Get the current balance"""
        with self._lock:
            return self._balance

    def get_history(self) -> Tuple[TransactionRecord, ...]:
        """Snapshot of the history in chronological order"""
        with self._lock:
            return tuple(self._history)

    def _deposit(self, amount: AmountLike, label: str) -> TransactionResult:
        money = to_money(amount, self._currency)

        with self._lock:
            if not money.is_positive():
                return self._reject(
                    "deposit", TransactionError.INVALID_AMOUNT, money,
                    "Deposit failed: Amount must be positive."
                )

            record = self._commit(TransactionKind.DEPOSIT, money, self._balance + money, label)
            self._commit_notify(DomainEvent.DEPOSIT_POSTED, record)
            return TransactionResult(success=True, balance=self._balance, record=record)

    def _commit(self, kind: TransactionKind, amount: Money, new_balance: Money,
                label: str) -> TransactionRecord:
        # Caller holds the lock; balance and history change together or not at all
        record = TransactionRecord(
            id=str(uuid.uuid4()),
            sequence=len(self._history) + 1,
            kind=kind,
            amount=amount,
            resulting_balance=new_balance,
            timestamp=self._clock(),
            label=label
        )
        self._history.append(record)
        self._balance = new_balance
        return record

    def _commit_notify(self, event_type: DomainEvent, record: TransactionRecord) -> None:
        log_action(
            self.logger, "info", f"Transaction posted: {record.kind.value}",
            action=f"{record.kind.value}_posted",
            resource=f"account:{self._account_number}",
            extra=record.to_dict()
        )
        self._publish_event(event_type, record.to_dict())

    def _reject(self, operation: str, error: TransactionError, amount: Money,
                message: str) -> TransactionResult:
        log_action(
            self.logger, "warning", message,
            action=f"{operation}_rejected",
            resource=f"account:{self._account_number}",
            extra={
                "error": error.value,
                "amount": str(amount.amount),
                "balance": str(self._balance.amount),
            }
        )
        self._publish_event(DomainEvent.TRANSACTION_REJECTED, {
            "operation": operation,
            "error": error.value,
            "amount": str(amount.amount),
            "balance": str(self._balance.amount),
            "currency": self._currency.code,
            "message": message,
        })
        return TransactionResult(success=False, balance=self._balance, error=error, message=message)

    def _publish_event(self, event_type: DomainEvent, data: Dict[str, Any]) -> None:
        """Publish a domain event if an event dispatcher is attached"""
        if self._event_dispatcher:
            self._event_dispatcher.publish(EventPayload(
                event_type=event_type,
                entity_type="account",
                entity_id=self._account_number,
                data=data
            ))
