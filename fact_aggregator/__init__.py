"""Multi-provider claim verification and trust score aggregation."""

__version__ = "0.1.0"
