"""
Test suite for the console simulation

Runs the scripted demo against in-memory streams and checks the printed
status lines and the resulting account.
"""

import io
import pytest
from decimal import Decimal
from unittest.mock import patch

from bank_simulation import simulation
from bank_simulation.config import BankSimulationConfig
from bank_simulation.currency import Currency
from bank_simulation.events import DomainEvent, EventPayload
from bank_simulation.simulation import ConsoleReporter, run_simulation


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


class TestConsoleReporter:
    """Test status lines for individual events"""

    def test_deposit_line(self, streams):
        out, err = streams
        ConsoleReporter(out, err).handle(EventPayload(
            DomainEvent.DEPOSIT_POSTED, "account", "S-1",
            {"amount": "250.50", "resulting_balance": "1250.50"}
        ))
        assert out.getvalue() == "💰 Successfully deposited $250.50. Current Balance: $1250.50\n"
        assert err.getvalue() == ""

    def test_invalid_amount_goes_to_stderr(self, streams):
        out, err = streams
        ConsoleReporter(out, err).handle(EventPayload(
            DomainEvent.TRANSACTION_REJECTED, "account", "S-1",
            {"operation": "withdrawal", "error": "invalid_amount", "amount": "0.00", "balance": "5.00"}
        ))
        assert out.getvalue() == ""
        assert err.getvalue() == "❌ Withdrawal failed: Amount must be positive.\n"

    def test_lines_use_event_currency(self, streams):
        out, err = streams
        reporter = ConsoleReporter(out, err)
        reporter.handle(EventPayload(
            DomainEvent.WITHDRAWAL_POSTED, "account", "EU-1",
            {"amount": "10.00", "resulting_balance": "89.99", "currency": "EUR"}
        ))
        reporter.handle(EventPayload(
            DomainEvent.TRANSACTION_REJECTED, "account", "JP-1",
            {"operation": "withdrawal", "error": "insufficient_funds",
             "amount": "5000", "balance": "1125", "currency": "JPY"}
        ))
        assert out.getvalue() == "💸 Successfully withdrew €10.00. Current Balance: €89.99\n"
        assert err.getvalue() == (
            "🛑 Withdrawal failed: Insufficient funds. Requested: ¥5000, Available: ¥1125\n"
        )


class TestRunSimulation:
    """Test the scripted demo sequence"""

    def test_default_sequence(self, streams):
        out, err = streams

        account = run_simulation(BankSimulationConfig(), out=out, err=err)

        assert account.account_number == "S-987654321"
        assert account.get_balance().amount == Decimal("1125.50")
        assert len(account.get_history()) == 3

        output = out.getvalue()
        expected_in_order = [
            "--- Starting Bank Account Simulation ---",
            "💰 Successfully deposited $1000.00. Current Balance: $1000.00",
            "✅ New account created: S-987654321 with initial balance: $1000.00",
            "--- ACTION: Check Balance (Initial) ---",
            "Current Balance: $1000.00",
            "--- ACTION: Deposit $250.50 ---",
            "💰 Successfully deposited $250.50. Current Balance: $1250.50",
            "Current Balance: $1250.50",
            "--- ACTION: Withdraw $125.00 ---",
            "💸 Successfully withdrew $125.00. Current Balance: $1125.50",
            "Current Balance: $1125.50",
            "--- ACTION: Withdraw $5000.00 (exceeds balance) ---",
            "--- TRANSACTION HISTORY for Account S-987654321 ---",
            "--- END OF HISTORY ---",
            "--- Simulation Complete ---",
        ]
        position = 0
        for fragment in expected_in_order:
            found = output.find(fragment, position)
            assert found >= 0, f"missing or out of order: {fragment}"
            position = found + len(fragment)

        assert err.getvalue() == (
            "🛑 Withdrawal failed: Insufficient funds. Requested: $5000.00, Available: $1125.50\n"
        )

    def test_overdraft_step_disabled(self, streams):
        out, err = streams
        config = BankSimulationConfig(demo_overdraft_amount="")

        run_simulation(config, out=out, err=err)

        assert "exceeds balance" not in out.getvalue()
        assert err.getvalue() == ""

    def test_rejected_initial_deposit(self, streams):
        out, err = streams
        config = BankSimulationConfig(demo_initial_deposit="0", demo_overdraft_amount="")

        account = run_simulation(config, out=out, err=err)

        assert "❌ Deposit failed: Amount must be positive." in err.getvalue()
        assert "with initial balance: $0.00" in out.getvalue()
        assert account.get_balance().amount == Decimal("125.50")
        assert len(account.get_history()) == 2

    def test_custom_amounts(self, streams):
        out, err = streams
        config = BankSimulationConfig(
            demo_account_number="T-1",
            demo_initial_deposit="$2,000.00",
            demo_deposit_amount="0.10",
            demo_withdrawal_amount="0.20",
            demo_overdraft_amount="",
        )

        account = run_simulation(config, out=out, err=err)

        assert account.get_balance().amount == Decimal("1999.90")
        assert "--- TRANSACTION HISTORY for Account T-1 ---" in out.getvalue()

    def test_euro_account(self, streams):
        """Test console amounts carry the configured currency symbol"""
        out, err = streams

        account = run_simulation(BankSimulationConfig(default_currency="EUR"), out=out, err=err)

        assert account.currency == Currency.EUR
        assert "--- ACTION: Deposit €250.50 ---" in out.getvalue()
        assert "Current Balance: €1125.50" in out.getvalue()
        assert "New Balance: €1125.50 | Withdrawal" in out.getvalue()
        assert "$" not in out.getvalue()
        assert err.getvalue() == (
            "🛑 Withdrawal failed: Insufficient funds. Requested: €5000.00, Available: €1125.50\n"
        )

    def test_yen_account(self, streams):
        """Test a zero-decimal currency prints whole amounts"""
        out, err = streams
        config = BankSimulationConfig(
            default_currency="JPY",
            demo_initial_deposit="1000",
            demo_deposit_amount="250",
            demo_withdrawal_amount="125",
            demo_overdraft_amount="",
        )

        account = run_simulation(config, out=out, err=err)

        assert account.get_balance().amount == Decimal("1125")
        assert "💸 Successfully withdrew ¥125. Current Balance: ¥1125" in out.getvalue()
        assert err.getvalue() == ""

    def test_sub_unit_demo_amount_is_refused(self):
        config = BankSimulationConfig(default_currency="JPY")
        with pytest.raises(ValueError, match="decimal places"):
            config.demo_amount("250.50")


class TestMain:
    """Test the console entry point"""

    def test_main_configures_logging_and_runs(self, capsys):
        with patch.object(simulation, "setup_logging") as setup_logging:
            exit_code = simulation.main()

        assert exit_code == 0
        setup_logging.assert_called_once()
        captured = capsys.readouterr()
        assert "--- Simulation Complete ---" in captured.out
