"""Pre-schedule and roster statistics engine for nursing units."""

__version__ = "0.1.0"
