"""In-memory collateral custody contracts for a money market, with reward forwarding."""

__version__ = "0.1.0"