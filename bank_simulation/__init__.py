"""
Bank Simulation

A single bank account with exact Decimal money, an append-only
transaction history and per-account serialized updates.
"""

__version__ = "1.0.0"
