"""Read-only HTTP query service over an indexed Runes ledger."""

__version__ = "0.1.0"

__all__ = ["__version__"]
