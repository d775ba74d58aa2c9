"""Scripts, addresses, block headers, transactions, fees, JSON views and HTTP responses for a block explorer API."""

__version__ = "0.1.0"