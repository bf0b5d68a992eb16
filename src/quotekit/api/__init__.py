"""HTTP API for QuoteKit."""
