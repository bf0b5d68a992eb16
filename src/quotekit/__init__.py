"""QuoteKit - embeddable quote calculators for small businesses."""

__version__ = "1.0.0"
