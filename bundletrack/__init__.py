"""Production-floor bundle tracking service."""

__version__ = "0.1.0"
