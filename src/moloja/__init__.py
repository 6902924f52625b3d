"""Moloja - receipt documents for the Moloja point of sale."""

__version__ = "0.3.0"
