"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings

from .currency import Currency, Money, to_money


class BankSimulationConfig(BaseSettings):
    """Bank simulation configuration"""

    # Logging configuration
    log_level: str = "ERROR"  # console demo stays quiet unless raised
    log_format: str = "json"  # json or text

    # Account configuration
    default_currency: str = "USD"

    # Display configuration
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"

    # Demo sequence
    demo_account_number: str = "S-987654321"
    demo_initial_deposit: str = "1000.00"
    demo_deposit_amount: str = "250.50"
    demo_withdrawal_amount: str = "125.00"
    demo_overdraft_amount: str = "5000.00"  # Empty disables the overdraft attempt

    class Config:
        env_prefix = "BANKSIM_"
        env_file = ".env"
        case_sensitive = False

    @property
    def currency(self) -> Currency:
        """Resolve default_currency to a Currency member"""
        try:
            return Currency[self.default_currency.upper()]
        except KeyError:
            raise ValueError(f"Unsupported currency code: {self.default_currency}")

    def demo_amount(self, value: str) -> Money:
        """Parse a configured demo amount in the default currency"""
        return to_money(value, self.currency)


# Global configuration instance
config = BankSimulationConfig()


def get_config() -> BankSimulationConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankSimulationConfig:
    """Reload configuration from environment"""
    global config
    config = BankSimulationConfig()
    return config
