"""Search and filter core of a real-estate listing application."""

__version__ = "0.1.0"
