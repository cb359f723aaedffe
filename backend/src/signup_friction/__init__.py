"""Fraud-scored signup and post-signup re-verification services."""

__version__ = "0.1.0"
