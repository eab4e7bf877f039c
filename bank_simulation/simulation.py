"""
Console Simulation Module

Scripted demo of account operations. The ConsoleReporter subscribes to
account events and prints status lines; the driver walks through the
configured sequence and prints balances and the final history.
"""

import sys
from typing import Optional, TextIO

from .accounts import Account, TransactionError
from .currency import Currency
from .config import BankSimulationConfig, get_config
from .events import DomainEvent, EventDispatcher, EventPayload
from .formatting import format_history, format_money
from .logging_config import get_logger, setup_logging


class ConsoleReporter:
    """Prints one status line per account event"""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def attach(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe_all(self.handle)

    def handle(self, event: EventPayload) -> None:
        data = event.data
        currency = Currency[data.get("currency", Currency.USD.code)]
        if event.event_type == DomainEvent.ACCOUNT_OPENED:
            self._print(f"✅ New account created: {event.entity_id} "
                        f"with initial balance: {format_money(data['balance'], currency)}")
        elif event.event_type == DomainEvent.DEPOSIT_POSTED:
            self._print(f"💰 Successfully deposited {format_money(data['amount'], currency)}. "
                        f"Current Balance: {format_money(data['resulting_balance'], currency)}")
        elif event.event_type == DomainEvent.WITHDRAWAL_POSTED:
            self._print(f"💸 Successfully withdrew {format_money(data['amount'], currency)}. "
                        f"Current Balance: {format_money(data['resulting_balance'], currency)}")
        elif event.event_type == DomainEvent.TRANSACTION_REJECTED:
            self._print_rejection(data, currency)

    def _print_rejection(self, data: dict, currency: Currency) -> None:
        operation = data['operation'].capitalize()
        if data['error'] == TransactionError.INSUFFICIENT_FUNDS.value:
            self._print(f"🛑 {operation} failed: Insufficient funds. "
                        f"Requested: {format_money(data['amount'], currency)}, "
                        f"Available: {format_money(data['balance'], currency)}", stream=self.err)
        else:
            self._print(f"❌ {operation} failed: Amount must be positive.", stream=self.err)

    def _print(self, line: str, stream: Optional[TextIO] = None) -> None:
        print(line, file=stream or self.out)


def run_simulation(config: Optional[BankSimulationConfig] = None,
                   out: Optional[TextIO] = None,
                   err: Optional[TextIO] = None) -> Account:
    """
    Run the demo sequence and return the account it created

    Sequence: open the account, check the balance, deposit, check,
    withdraw, check, optionally attempt an over-balance withdrawal,
    then print the history.
    """
    config = config or get_config()
    out = out or sys.stdout
    logger = get_logger("bank_simulation.simulation")

    dispatcher = EventDispatcher()
    ConsoleReporter(out, err).attach(dispatcher)

    def say(line: str = "") -> None:
        print(line, file=out)

    def check_balance(title: str) -> None:
        say(f"\n--- {title} ---")
        say(f"Current Balance: {format_money(account.get_balance())}")

    say("--- Starting Bank Account Simulation ---")
    account = Account(
        config.demo_account_number,
        config.demo_amount(config.demo_initial_deposit),
        currency=config.currency,
        event_dispatcher=dispatcher
    )

    check_balance("ACTION: Check Balance (Initial)")

    deposit_amount = config.demo_amount(config.demo_deposit_amount)
    say(f"\n--- ACTION: Deposit {format_money(deposit_amount)} ---")
    account.deposit(deposit_amount)
    check_balance("CHECK: Balance after Deposit")

    withdrawal_amount = config.demo_amount(config.demo_withdrawal_amount)
    say(f"\n--- ACTION: Withdraw {format_money(withdrawal_amount)} ---")
    account.withdraw(withdrawal_amount)
    check_balance("CHECK: Balance after Withdrawal")

    if config.demo_overdraft_amount:
        overdraft_amount = config.demo_amount(config.demo_overdraft_amount)
        say(f"\n--- ACTION: Withdraw {format_money(overdraft_amount)} (exceeds balance) ---")
        account.withdraw(overdraft_amount)
        check_balance("CHECK: Balance after Rejected Withdrawal")

    say()
    for line in format_history(account.account_number, account.get_history(), config.timestamp_format):
        say(line)

    say("\n--- Simulation Complete ---")
    logger.debug(f"Simulation finished with {len(account.get_history())} transactions")
    return account


def main() -> int:
    """Console entry point"""
    config = get_config()
    setup_logging(config.log_level, "bank_simulation", config.log_format)
    run_simulation(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
