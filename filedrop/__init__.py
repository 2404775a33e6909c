"""File upload service with token-based ownership."""

__version__ = "0.1.0"
